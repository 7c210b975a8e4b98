from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.application.exceptions import BookingValidationError
from app.core.config import settings
from app.domain.entities.schedule import STANDARD_TIMES

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def schedule_zone(name: str | None = None) -> ZoneInfo:
    """The single time zone every slot comparison happens in."""
    return ZoneInfo(name or settings.SCHEDULE_TIMEZONE)


def parse_day(value: str | date) -> date:
    """Parse YYYY-MM-DD (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    # ISO timestamps are cut to their date part
    if "T" in text:
        text = text.split("T", 1)[0]
    if not _DATE_RE.match(text):
        raise BookingValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise BookingValidationError(f"Invalid date {value!r}: {e}") from e


def normalize_time(value: str) -> str:
    """Return the HH:MM form of ``value`` if it is one of the standard times."""
    match = _TIME_RE.match(str(value or "").strip())
    if not match:
        raise BookingValidationError(f"Invalid time {value!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    normalized = f"{hour:02d}:{minute:02d}"
    if normalized not in STANDARD_TIMES:
        raise BookingValidationError(
            f"Time {normalized} is not a bookable slot; choose one of {', '.join(STANDARD_TIMES)}"
        )
    return normalized


def slot_window(day: date, slot_time: str, timezone: ZoneInfo, duration_minutes: int) -> tuple[datetime, datetime]:
    hour, minute = (int(part) for part in slot_time.split(":"))
    start = datetime.combine(day, time(hour=hour, minute=minute), tzinfo=timezone)
    return start, start + timedelta(minutes=duration_minutes)


def local_hhmm(moment: datetime, timezone: ZoneInfo) -> str:
    """HH:MM of ``moment`` in ``timezone``; naive datetimes are taken as already local."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone)
    return moment.astimezone(timezone).strftime("%H:%M")


def local_day(moment: datetime, timezone: ZoneInfo) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone)
    return moment.astimezone(timezone).date()
