from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from app.application.exceptions import ExternalSyncError
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.agent_dispatcher import AgentIntentDispatcher
from app.application.use_cases.booking import BookingStateMachine
from app.application.use_cases.schedule_view import ScheduleViewUseCase
from app.domain.entities.external_event import ExternalEvent
from app.infrastructure.calendar.mock_calendar import MockCalendar
from app.infrastructure.notifier.mock_notifier import MockNotifier
from app.infrastructure.store.memory_store import MemorySlotStore

TZ = ZoneInfo("America/Mexico_City")
DAY = date(2025, 3, 10)


class FlakyCalendar(MockCalendar):
    """MockCalendar whose operations can be switched to fail."""

    def __init__(self, timezone: ZoneInfo) -> None:
        super().__init__(timezone)
        self.fail_create = False
        self.fail_list = False
        self.fail_delete = False
        self.created: list[str] = []
        self.deleted: list[str] = []

    def list_events(self, day: date) -> list[ExternalEvent]:
        if self.fail_list:
            raise ExternalSyncError("calendar listing timed out")
        return super().list_events(day)

    def create_event(self, subject: str, description: str, start: datetime, end: datetime, attendee_email: str) -> str:
        if self.fail_create:
            raise ExternalSyncError("calendar unavailable")
        event_id = super().create_event(subject, description, start, end, attendee_email)
        self.created.append(event_id)
        return event_id

    def delete_event(self, event_id: str) -> bool:
        if self.fail_delete:
            raise ExternalSyncError("calendar delete failed")
        self.deleted.append(event_id)
        return super().delete_event(event_id)


class BrokenNotifier(NotifierPort):
    def send(self, to_email: str, subject: str, body: str) -> None:
        raise ExternalSyncError("smtp relay refused")


@pytest.fixture
def store() -> MemorySlotStore:
    return MemorySlotStore()


@pytest.fixture
def calendar() -> FlakyCalendar:
    return FlakyCalendar(TZ)


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def booking(store, calendar, notifier) -> BookingStateMachine:
    return BookingStateMachine(store=store, calendar=calendar, notifier=notifier, timezone=TZ, slot_minutes=60)


@pytest.fixture
def view(store, calendar) -> ScheduleViewUseCase:
    return ScheduleViewUseCase(store=store, calendar=calendar, timezone=TZ)


@pytest.fixture
def dispatcher(view, booking) -> AgentIntentDispatcher:
    return AgentIntentDispatcher(schedule_view=view, booking=booking)


def book_ana(booking: BookingStateMachine, time: str = "09:00"):
    return booking.book(DAY, time, name="Ana", email="ana@x.com", company="Acme", subject="Kickoff")


def fake_openai_client(tool_calls: list[tuple[str, str, str]], content: str | None = None) -> SimpleNamespace:
    """Stand-in for openai.OpenAI whose completion carries the given (id, name, raw_arguments) calls."""
    message = SimpleNamespace(
        content=content,
        tool_calls=[
            SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))
            for call_id, name, arguments in tool_calls
        ],
    )
    completion = SimpleNamespace(choices=[SimpleNamespace(message=message)])
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=lambda **_: completion)))
