from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.domain.entities.schedule import Day, Slot


class SideEffectTarget(str, Enum):
    CALENDAR = "calendar"
    EMAIL = "email"


@dataclass(frozen=True)
class SideEffectOutcome:
    target: SideEffectTarget
    ok: bool
    detail: str | None = None
    skipped: bool = False


@dataclass(frozen=True)
class BookingOutcome:
    """Result of a committed transition plus its best-effort side effects.

    The internal commit (``day``/``slot``) is always durable when an outcome
    exists; ``side_effects`` reports what happened on the external calendar
    and the notifier afterwards.
    """

    action: str  # "booked", "cancelled" or "noop"
    day: Day
    slot: Slot
    previous: Slot
    side_effects: tuple[SideEffectOutcome, ...] = ()
    calendar_event_id: str | None = None

    @property
    def changed(self) -> bool:
        return self.action != "noop"

    @property
    def calendar_error(self) -> str | None:
        return self._error_for(SideEffectTarget.CALENDAR)

    @property
    def email_error(self) -> str | None:
        return self._error_for(SideEffectTarget.EMAIL)

    @property
    def has_warnings(self) -> bool:
        return any(not outcome.ok and not outcome.skipped for outcome in self.side_effects)

    def _error_for(self, target: SideEffectTarget) -> str | None:
        for outcome in self.side_effects:
            if outcome.target == target and not outcome.ok and not outcome.skipped:
                return outcome.detail or "unknown error"
        return None
