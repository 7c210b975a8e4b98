from __future__ import annotations

import json
import logging
import threading
from datetime import date
from pathlib import Path
from typing import Any

from app.application.exceptions import SlotConflictError, SlotNotFoundError
from app.application.ports.slot_store import SlotStorePort
from app.domain.entities.schedule import Day, Slot, SlotStatus


class JsonSlotStore(SlotStorePort):
    """One JSON document per date, written atomically via temp file + rename."""

    def __init__(self, data_dir: str = "./data/schedule") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[date, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, day: date) -> threading.Lock:
        """Get or create the lock guarding one date's document."""
        with self._lock_lock:
            if day not in self._locks:
                self._locks[day] = threading.Lock()
            return self._locks[day]

    def _get_file_path(self, day: date) -> Path:
        return self._data_dir / f"{day.isoformat()}.json"

    def _load_day(self, day: date) -> Day | None:
        file_path = self._get_file_path(day)
        if not file_path.exists():
            return None
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return self._deserialize_day(data)

    def _save_day(self, day: Day) -> None:
        """Save day document to JSON file atomically."""
        file_path = self._get_file_path(day.date)
        temp_path = file_path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._serialize_day(day), f, indent=2, ensure_ascii=False)
            # Atomic rename
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def _serialize_day(self, day: Day) -> dict[str, Any]:
        return {
            "date": day.date.isoformat(),
            "slots": [
                {
                    "time": slot.time,
                    "status": slot.status.value,
                    "name": slot.name,
                    "email": slot.email,
                    "company": slot.company,
                    "subject": slot.subject,
                }
                for slot in day.slots
            ],
        }

    def _deserialize_day(self, data: dict[str, Any]) -> Day:
        return Day(
            date=date.fromisoformat(data["date"]),
            slots=tuple(
                Slot(
                    time=item["time"],
                    status=SlotStatus(item.get("status", "available")),
                    name=item.get("name", ""),
                    email=item.get("email", ""),
                    company=item.get("company", ""),
                    subject=item.get("subject", ""),
                )
                for item in data.get("slots", [])
            ),
        )

    def find_day(self, day: date) -> Day | None:
        with self._get_lock(day):
            return self._load_day(day)

    def upsert_day(self, day: Day) -> Day:
        with self._get_lock(day.date):
            self._save_day(day)
            return day

    def create_day_if_absent(self, day: Day) -> tuple[Day, bool]:
        with self._get_lock(day.date):
            existing = self._load_day(day.date)
            if existing is not None:
                return existing, False
            self._save_day(day)
            return day, True

    def list_days(self) -> list[Day]:
        days: list[Day] = []
        for file_path in sorted(self._data_dir.glob("*.json")):
            try:
                day = date.fromisoformat(file_path.stem)
            except ValueError:
                self._logger.warning("Skipping unexpected file in store", extra={"error": file_path.name})
                continue
            loaded = self.find_day(day)
            if loaded is not None:
                days.append(loaded)
        return days

    def update_slot(
        self,
        day: date,
        replacement: Slot,
        expected_status: SlotStatus | None = None,
    ) -> tuple[Slot, Day]:
        with self._get_lock(day):
            stored = self._load_day(day)
            current = stored.slot_at(replacement.time) if stored else None
            if stored is None or current is None:
                raise SlotNotFoundError(f"No schedule slot for {day.isoformat()} {replacement.time}")
            if expected_status is not None and current.status != expected_status:
                raise SlotConflictError(
                    f"Slot {day.isoformat()} {replacement.time} is {current.status.value}",
                    current.status,
                )
            updated = stored.with_slot(replacement)
            self._save_day(updated)
            return current, updated
