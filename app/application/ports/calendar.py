from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from app.domain.entities.external_event import ExternalEvent


class CalendarPort(ABC):
    """External calendar, co-authoritative for whether a time is occupied."""

    @abstractmethod
    def list_events(self, day: date) -> list[ExternalEvent]:
        """List events starting on ``day`` in the schedule time zone."""
        raise NotImplementedError

    @abstractmethod
    def create_event(
        self,
        subject: str,
        description: str,
        start: datetime,
        end: datetime,
        attendee_email: str,
    ) -> str:
        """Create calendar event. Returns event_id."""
        raise NotImplementedError

    @abstractmethod
    def delete_event(self, event_id: str) -> bool:
        """Delete calendar event. Returns False if it no longer exists."""
        raise NotImplementedError
