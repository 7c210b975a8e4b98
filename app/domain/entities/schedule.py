from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum


STANDARD_TIMES: tuple[str, ...] = (
    "09:00",
    "10:00",
    "11:00",
    "12:00",
    "13:00",
    "14:00",
    "15:00",
    "16:00",
)


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class Slot:
    time: str
    status: SlotStatus = SlotStatus.AVAILABLE
    name: str = ""
    email: str = ""
    company: str = ""
    subject: str = ""

    def __post_init__(self) -> None:
        has_metadata = any((self.name, self.email, self.company, self.subject))
        if self.status != SlotStatus.BOOKED and has_metadata:
            raise ValueError(f"Slot {self.time} is {self.status.value} but carries booking metadata")
        if self.status == SlotStatus.BOOKED and not has_metadata:
            raise ValueError(f"Slot {self.time} is booked without booking metadata")

    @property
    def is_booked(self) -> bool:
        return self.status == SlotStatus.BOOKED

    def booked(self, name: str, email: str, company: str, subject: str) -> Slot:
        return Slot(
            time=self.time,
            status=SlotStatus.BOOKED,
            name=name,
            email=email,
            company=company,
            subject=subject,
        )

    def cleared(self) -> Slot:
        return Slot(time=self.time)


@dataclass(frozen=True)
class Day:
    date: date
    slots: tuple[Slot, ...] = field(default_factory=tuple)

    @classmethod
    def materialize(cls, day: date, blocked_times: tuple[str, ...] | list[str] = ()) -> Day:
        """Build a Day with one slot per standard time, all available unless blocked."""
        blocked = set(blocked_times)
        return cls(
            date=day,
            slots=tuple(
                Slot(time=t, status=SlotStatus.BLOCKED if t in blocked else SlotStatus.AVAILABLE)
                for t in STANDARD_TIMES
            ),
        )

    def slot_at(self, time: str) -> Slot | None:
        for slot in self.slots:
            if slot.time == time:
                return slot
        return None

    def with_slot(self, new_slot: Slot) -> Day:
        return replace(
            self,
            slots=tuple(new_slot if s.time == new_slot.time else s for s in self.slots),
        )


@dataclass(frozen=True)
class DayView:
    """Merged, user-facing view of one date. Never persisted."""

    date: date
    slots: tuple[Slot, ...]
    calendar_error: str | None = None

    def slot_at(self, time: str) -> Slot | None:
        for slot in self.slots:
            if slot.time == time:
                return slot
        return None
