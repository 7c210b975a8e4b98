from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IntentAction(str, Enum):
    BOOK_SLOT = "bookSlot"
    GET_SCHEDULE_BY_DATE = "getScheduleByDate"
    CANCEL_BOOKING = "cancelBooking"


class ConfirmationStage(str, Enum):
    PROPOSED = "proposed"  # summary not shown yet, or user has not agreed
    CONFIRMED = "confirmed"  # checkout shown and user agreed, safe to apply
    APPLIED = "applied"


@dataclass(frozen=True)
class Intent:
    action: IntentAction
    arguments: dict[str, Any] = field(default_factory=dict)
    checkout: bool = False
    confirmation: bool = False

    @property
    def stage(self) -> ConfirmationStage:
        if self.checkout and self.confirmation:
            return ConfirmationStage.CONFIRMED
        return ConfirmationStage.PROPOSED
