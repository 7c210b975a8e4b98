from __future__ import annotations

from typing import Any

from app.domain.entities.booking_outcome import BookingOutcome
from app.domain.entities.schedule import Day, DayView, Slot


def slot_to_dict(slot: Slot) -> dict[str, Any]:
    return {
        "time": slot.time,
        "status": slot.status.value,
        "name": slot.name,
        "email": slot.email,
        "company": slot.company,
        "subject": slot.subject,
    }


def day_to_dict(day: Day | DayView) -> dict[str, Any]:
    result: dict[str, Any] = {
        "date": day.date.isoformat(),
        "slots": [slot_to_dict(s) for s in day.slots],
    }
    if isinstance(day, DayView):
        result["calendar_error"] = day.calendar_error
    return result


def outcome_to_dict(outcome: BookingOutcome) -> dict[str, Any]:
    return {
        "action": outcome.action,
        "date": outcome.day.date.isoformat(),
        "slot": slot_to_dict(outcome.slot),
        "day": day_to_dict(outcome.day),
        "calendar_event_id": outcome.calendar_event_id,
        "calendar_error": outcome.calendar_error,
        "email_error": outcome.email_error,
        "side_effects": [
            {
                "target": effect.target.value,
                "ok": effect.ok,
                "skipped": effect.skipped,
                "detail": effect.detail,
            }
            for effect in outcome.side_effects
        ],
    }
