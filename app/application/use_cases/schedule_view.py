from __future__ import annotations

import logging
from datetime import date
from zoneinfo import ZoneInfo

from app.application.ports.calendar import CalendarPort
from app.application.ports.slot_store import SlotStorePort
from app.application.utils.schedule_times import local_day, local_hhmm
from app.domain.entities.external_event import ExternalEvent
from app.domain.entities.schedule import STANDARD_TIMES, Day, DayView, Slot, SlotStatus


def merge_day(
    day: date,
    internal: Day | None,
    events: list[ExternalEvent],
    timezone: ZoneInfo,
    calendar_error: str | None = None,
) -> DayView:
    """
    Reconcile the internal Day with external calendar events, slot by slot.

    Precedence per standard time:
    1. internal booked: reported verbatim (internal metadata is richer)
    2. external event starting at that minute: booked, subject/name from the event
    3. internal blocked: blocked
    4. otherwise available
    A missing internal Day reads as all-available.
    """
    events_by_time: dict[str, ExternalEvent] = {}
    for event in events:
        if local_day(event.start, timezone) != day:
            continue
        events_by_time.setdefault(local_hhmm(event.start, timezone), event)

    slots: list[Slot] = []
    for slot_time in STANDARD_TIMES:
        stored = internal.slot_at(slot_time) if internal else None
        event = events_by_time.get(slot_time)

        if stored is not None and stored.is_booked:
            slots.append(stored)
        elif event is not None:
            slots.append(
                Slot(
                    time=slot_time,
                    status=SlotStatus.BOOKED,
                    name=event.attendee_name,
                    subject=event.summary or "Busy",
                )
            )
        elif stored is not None and stored.status == SlotStatus.BLOCKED:
            slots.append(stored)
        else:
            slots.append(Slot(time=slot_time))

    return DayView(date=day, slots=tuple(slots), calendar_error=calendar_error)


class ScheduleViewUseCase:
    def __init__(self, store: SlotStorePort, calendar: CalendarPort, timezone: ZoneInfo) -> None:
        self._store = store
        self._calendar = calendar
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def get_day(self, day: date) -> DayView:
        internal = self._store.find_day(day)

        calendar_error = None
        try:
            events = self._calendar.list_events(day)
        except Exception as e:
            # Internal view is still served; the caller sees which side failed.
            self._logger.warning(
                "Calendar listing failed, serving internal view only",
                extra={"date": day.isoformat(), "error": str(e)},
            )
            events = []
            calendar_error = str(e) or type(e).__name__

        return merge_day(day, internal, events, self._timezone, calendar_error=calendar_error)

    def list_days(self) -> list[Day]:
        return sorted(self._store.list_days(), key=lambda d: d.date)
