"""
Tests for intent dispatch and the checkout/confirmation gate.
"""

from __future__ import annotations

import json

import pytest

from app.application.dto.tool_call import ToolCallDTO
from app.domain.entities.intent import ConfirmationStage, Intent, IntentAction
from app.domain.entities.schedule import SlotStatus

from conftest import DAY, book_ana

BOOK_ARGS = {
    "date": "2025-03-10",
    "time": "09:00",
    "name": "Ana",
    "email": "ana@x.com",
    "company": "Acme",
    "subject": "Kickoff",
}


@pytest.mark.parametrize("checkout,confirmation", [(False, False), (True, False), (False, True)])
def test_book_intent_without_both_flags_never_mutates(dispatcher, booking, store, calendar, checkout, confirmation):
    """A book intent missing either gate flag is held and touches nothing."""
    booking.create_day(DAY)
    intent = Intent(
        action=IntentAction.BOOK_SLOT,
        arguments=dict(BOOK_ARGS),
        checkout=checkout,
        confirmation=confirmation,
    )

    result = dispatcher.dispatch(intent)

    assert store.find_day(DAY).slot_at("09:00").status == SlotStatus.AVAILABLE
    assert calendar.created == []
    assert result.function_type == "booking"
    assert result.data["stage"] == ConfirmationStage.PROPOSED.value
    assert result.error["type"] == "ValidationError"
    assert result.status_code == 400
    assert result.message.startswith("Please confirm")


def test_cancel_intent_without_confirmation_keeps_booking(dispatcher, booking, store):
    """An unconfirmed cancel leaves the booking in place."""
    booking.create_day(DAY)
    book_ana(booking)

    result = dispatcher.dispatch(
        Intent(action=IntentAction.CANCEL_BOOKING, arguments={"date": "2025-03-10", "time": "09:00"}, checkout=True)
    )

    assert result.error["message"].endswith("missing: confirmation")
    assert store.find_day(DAY).slot_at("09:00").is_booked


def test_confirmed_book_intent_applies_and_templates_message(dispatcher, booking, store):
    """A confirmed book intent commits and renders the booking message."""
    booking.create_day(DAY)

    result = dispatcher.dispatch(
        Intent(action=IntentAction.BOOK_SLOT, arguments=dict(BOOK_ARGS), checkout=True, confirmation=True)
    )
    envelope = result.to_envelope()

    assert "error" not in envelope
    assert envelope["functionResult"]["type"] == "booking"
    assert envelope["functionResult"]["message"] == (
        'Your meeting "Kickoff" is booked for 2025-03-10 at 09:00 under Ana (ana@x.com).'
    )
    assert envelope["functionResult"]["data"]["stage"] == "applied"
    assert store.find_day(DAY).slot_at("09:00").is_booked


def test_schedule_query_has_no_gate(dispatcher, booking):
    """Schedule queries run without checkout or confirmation."""
    booking.create_day(DAY)
    book_ana(booking)

    result = dispatcher.dispatch(Intent(action=IntentAction.GET_SCHEDULE_BY_DATE, arguments={"date": "2025-03-10"}))

    assert result.error is None
    assert result.function_type == "schedule"
    assert result.message.startswith("Schedule for 2025-03-10: 7 of 8 slots available")
    assert result.data["slots"][0]["status"] == "booked"


def test_conflict_is_attached_as_error(dispatcher, booking):
    """A taken slot comes back as a Conflict error on the envelope."""
    booking.create_day(DAY)
    book_ana(booking)

    result = dispatcher.dispatch(
        Intent(action=IntentAction.BOOK_SLOT, arguments=dict(BOOK_ARGS), checkout=True, confirmation=True)
    )

    assert result.error["type"] == "Conflict"
    assert result.status_code == 409


def test_calendar_failure_is_mentioned_but_not_an_error(dispatcher, booking, calendar):
    """Calendar trouble is a warning in the message, not an envelope error."""
    booking.create_day(DAY)
    calendar.fail_create = True

    result = dispatcher.dispatch(
        Intent(action=IntentAction.BOOK_SLOT, arguments=dict(BOOK_ARGS), checkout=True, confirmation=True)
    )

    assert result.error is None
    assert result.data["calendar_error"] == "calendar unavailable"
    assert "calendar invite could not be updated" in result.message


def test_tool_call_with_json_arguments_and_inline_flags(dispatcher, booking, store):
    """JSON-string arguments with inline gate flags are decoded and applied."""
    booking.create_day(DAY)
    call = ToolCallDTO(
        name="bookSlot",
        arguments=json.dumps({**BOOK_ARGS, "checkout": True, "confirmation": "true"}),
    )

    result = dispatcher.dispatch_tool_call(call)

    assert result.error is None
    assert store.find_day(DAY).slot_at("09:00").is_booked


def test_unknown_action_is_a_validation_error(dispatcher):
    """An unknown tool name yields type "unknown" and a ValidationError."""
    result = dispatcher.dispatch_tool_call(ToolCallDTO(name="rescheduleSlot", arguments={}))

    assert result.function_type == "unknown"
    assert result.error["type"] == "ValidationError"


def test_missing_date_is_a_validation_error(dispatcher):
    """Missing required arguments are reported as ValidationError."""
    result = dispatcher.dispatch(Intent(action=IntentAction.GET_SCHEDULE_BY_DATE, arguments={}))

    assert result.error["message"] == "Missing required argument: date"


def test_dispatch_all_runs_sequentially_and_isolates_errors(dispatcher, booking, store):
    """Intents run in order and one failure does not stop the rest."""
    booking.create_day(DAY)
    calls = [
        ToolCallDTO(name="bookSlot", arguments={**BOOK_ARGS, "checkout": True, "confirmation": True}),
        ToolCallDTO(name="bookSlot", arguments={**BOOK_ARGS, "checkout": True, "confirmation": True}),
        ToolCallDTO(name="cancelBooking", arguments={"date": "2025-03-10", "time": "09:00", "checkout": True, "confirmation": True}),
        ToolCallDTO(name="getScheduleByDate", arguments={"date": "2025-03-10"}),
    ]

    results = dispatcher.dispatch_all(calls)

    assert [r.error["type"] if r.error else None for r in results] == [None, "Conflict", None, None]
    assert results[2].data["action"] == "cancelled"
    assert results[3].message.startswith("Schedule for 2025-03-10: 8 of 8")
    assert store.find_day(DAY).slot_at("09:00").status == SlotStatus.AVAILABLE
