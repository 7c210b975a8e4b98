from __future__ import annotations

import threading
from datetime import date

from app.application.exceptions import SlotConflictError, SlotNotFoundError
from app.application.ports.slot_store import SlotStorePort
from app.domain.entities.schedule import Day, Slot, SlotStatus


class MemorySlotStore(SlotStorePort):
    def __init__(self) -> None:
        self._days: dict[date, Day] = {}
        self._lock = threading.Lock()

    def find_day(self, day: date) -> Day | None:
        with self._lock:
            return self._days.get(day)

    def upsert_day(self, day: Day) -> Day:
        with self._lock:
            self._days[day.date] = day
            return day

    def create_day_if_absent(self, day: Day) -> tuple[Day, bool]:
        with self._lock:
            existing = self._days.get(day.date)
            if existing is not None:
                return existing, False
            self._days[day.date] = day
            return day, True

    def list_days(self) -> list[Day]:
        with self._lock:
            return list(self._days.values())

    def update_slot(
        self,
        day: date,
        replacement: Slot,
        expected_status: SlotStatus | None = None,
    ) -> tuple[Slot, Day]:
        with self._lock:
            stored = self._days.get(day)
            current = stored.slot_at(replacement.time) if stored else None
            if stored is None or current is None:
                raise SlotNotFoundError(f"No schedule slot for {day.isoformat()} {replacement.time}")
            if expected_status is not None and current.status != expected_status:
                raise SlotConflictError(
                    f"Slot {day.isoformat()} {replacement.time} is {current.status.value}",
                    current.status,
                )
            updated = stored.with_slot(replacement)
            self._days[day] = updated
            return current, updated
