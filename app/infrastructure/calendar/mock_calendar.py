from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.application.ports.calendar import CalendarPort
from app.domain.entities.external_event import Attendee, ExternalEvent


class MockCalendar(CalendarPort):
    def __init__(self, timezone: ZoneInfo) -> None:
        self._timezone = timezone
        self._events: dict[str, ExternalEvent] = {}
        self._counter = 0
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def list_events(self, day: date) -> list[ExternalEvent]:
        with self._lock:
            events = [e for e in self._events.values() if e.start.astimezone(self._timezone).date() == day]
        return sorted(events, key=lambda e: e.start)

    def create_event(
        self,
        subject: str,
        description: str,
        start: datetime,
        end: datetime,
        attendee_email: str,
    ) -> str:
        if start.tzinfo is None:
            start = start.replace(tzinfo=self._timezone)
        if end.tzinfo is None:
            end = end.replace(tzinfo=self._timezone)
        with self._lock:
            self._counter += 1
            event_id = f"mock_event_{self._counter}"
            self._events[event_id] = ExternalEvent(
                event_id=event_id,
                start=start,
                end=end,
                summary=subject,
                attendees=(Attendee(email=attendee_email),) if attendee_email else (),
                description=description,
            )
        self._logger.info(
            "Mock calendar event created",
            extra={"event_id": event_id, "date": start.date().isoformat(), "time": start.strftime("%H:%M")},
        )
        return event_id

    def delete_event(self, event_id: str) -> bool:
        with self._lock:
            removed = self._events.pop(event_id, None)
        if removed is not None:
            self._logger.info("Mock calendar event deleted", extra={"event_id": event_id})
            return True
        return False
