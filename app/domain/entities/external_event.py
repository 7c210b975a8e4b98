from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Attendee:
    email: str
    name: str = ""


@dataclass(frozen=True)
class ExternalEvent:
    event_id: str
    start: datetime
    end: datetime
    summary: str
    attendees: tuple[Attendee, ...] = ()
    description: str = ""

    def has_attendee(self, email: str) -> bool:
        wanted = email.strip().lower()
        return any(a.email.strip().lower() == wanted for a in self.attendees)

    @property
    def attendee_name(self) -> str:
        for attendee in self.attendees:
            if attendee.name:
                return attendee.name
        return ""
