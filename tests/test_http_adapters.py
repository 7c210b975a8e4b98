"""
Tests for the HTTP calendar and e-mail adapters using httpx mock transports.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import httpx
import pytest

from app.application.exceptions import ExternalSyncError
from app.application.use_cases.booking import BookingStateMachine
from app.infrastructure.calendar.cal_com_client import CalComCalendar
from app.infrastructure.notifier.email_client import HttpEmailNotifier
from app.infrastructure.notifier.mock_notifier import MockNotifier

from conftest import DAY, TZ, book_ana


def _calendar(handler) -> CalComCalendar:
    return CalComCalendar(
        timezone=TZ,
        api_key="test-key",
        calendar_id="42",
        base_url="https://cal.test/v1",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_list_events_keeps_active_bookings_of_the_day():
    """Cancelled bookings are dropped when listing events."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer test-key"
        return httpx.Response(
            200,
            json={
                "bookings": [
                    {
                        "id": 1,
                        "title": "Kickoff",
                        "startTime": "2025-03-10T15:00:00Z",
                        "endTime": "2025-03-10T16:00:00Z",
                        "attendees": [{"email": "ana@x.com", "name": "Ana"}],
                        "status": "ACCEPTED",
                    },
                    {
                        "id": 2,
                        "title": "Old",
                        "startTime": "2025-03-10T16:00:00Z",
                        "endTime": "2025-03-10T17:00:00Z",
                        "status": "CANCELLED",
                    },
                    {
                        "id": 3,
                        "title": "Tomorrow",
                        "startTime": "2025-03-11T15:00:00Z",
                        "endTime": "2025-03-11T16:00:00Z",
                    },
                ]
            },
        )

    events = _calendar(handler).list_events(DAY)

    assert [e.event_id for e in events] == ["1"]
    assert events[0].start.astimezone(TZ).strftime("%H:%M") == "09:00"
    assert events[0].attendee_name == "Ana"


def test_create_event_posts_attendee_and_returns_id():
    """Creating an event posts the attendee and returns the booking id."""
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"id": 987})

    start = datetime(2025, 3, 10, 9, 0, tzinfo=TZ)
    event_id = _calendar(handler).create_event("Kickoff", "desc", start, start + timedelta(hours=1), "ana@x.com")

    assert event_id == "987"
    assert seen["attendeeEmail"] == "ana@x.com"
    assert seen["title"] == "Kickoff"


def test_delete_missing_event_returns_false():
    """Deleting an unknown booking returns False."""
    calendar = _calendar(lambda request: httpx.Response(404))

    assert calendar.delete_event("nope") is False


def test_timeout_becomes_external_sync_error():
    """Transport timeouts surface as ExternalSyncError."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(ExternalSyncError):
        _calendar(handler).list_events(DAY)


def test_timeout_during_booking_is_non_fatal(store):
    """A calendar timeout during booking leaves the slot booked."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    booking = BookingStateMachine(store=store, calendar=_calendar(handler), notifier=MockNotifier(), timezone=TZ)
    booking.create_day(DAY)

    outcome = book_ana(booking)

    assert outcome.action == "booked"
    assert outcome.calendar_error.startswith("Calendar event creation failed")
    assert store.find_day(DAY).slot_at("09:00").is_booked


def test_email_notifier_raises_on_rejection():
    """A rejected send raises ExternalSyncError with the provider message."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "invalid recipient"})

    notifier = HttpEmailNotifier(
        api_key="k",
        send_endpoint="https://mail.test/emails",
        from_email="scheduling@example.com",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(ExternalSyncError, match="invalid recipient"):
        notifier.send("ana@x.com", "Hi", "Body")


def test_email_notifier_sends_payload():
    """The notifier posts sender, recipient, subject and text."""
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"id": "m1"})

    notifier = HttpEmailNotifier(
        api_key="k",
        send_endpoint="https://mail.test/emails",
        from_email="scheduling@example.com",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    notifier.send("ana@x.com", "Meeting confirmed: Kickoff", "Body")

    assert seen == {
        "from": "scheduling@example.com",
        "to": ["ana@x.com"],
        "subject": "Meeting confirmed: Kickoff",
        "text": "Body",
    }
