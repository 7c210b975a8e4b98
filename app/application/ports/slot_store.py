from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from app.domain.entities.schedule import Day, Slot, SlotStatus


class SlotStorePort(ABC):
    @abstractmethod
    def find_day(self, day: date) -> Day | None:
        raise NotImplementedError

    @abstractmethod
    def upsert_day(self, day: Day) -> Day:
        """Insert or replace the Day stored for ``day.date``."""
        raise NotImplementedError

    @abstractmethod
    def create_day_if_absent(self, day: Day) -> tuple[Day, bool]:
        """
        Atomically store ``day`` unless a Day already exists for its date.
        Returns (stored_day, created).
        """
        raise NotImplementedError

    @abstractmethod
    def list_days(self) -> list[Day]:
        raise NotImplementedError

    @abstractmethod
    def update_slot(
        self,
        day: date,
        replacement: Slot,
        expected_status: SlotStatus | None = None,
    ) -> tuple[Slot, Day]:
        """
        Conditionally replace the slot at ``replacement.time``.

        The status check and the write happen as one atomic step per date:
        if ``expected_status`` is given and the stored slot is in another
        status, nothing is written and SlotConflictError is raised.
        Raises SlotNotFoundError when the Day or the slot does not exist.
        Returns (previous_slot, updated_day).
        """
        raise NotImplementedError
