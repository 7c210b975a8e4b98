from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.application.exceptions import BookingValidationError, SlotConflictError, SlotNotFoundError
from app.application.ports.calendar import CalendarPort
from app.application.ports.notifier import NotifierPort
from app.application.ports.slot_store import SlotStorePort
from app.application.utils.schedule_times import normalize_time, slot_window
from app.domain.entities.booking_outcome import BookingOutcome, SideEffectOutcome, SideEffectTarget
from app.domain.entities.external_event import ExternalEvent
from app.domain.entities.schedule import Day, Slot, SlotStatus


class BookingStateMachine:
    """
    Applies book/cancel transitions to the slot store, then drives the
    external calendar and the notifier as best-effort side effects.

    Slot lifecycle: available -> booked -> available. The store write is
    conditional on the slot's current status, so two concurrent bookings for
    the same slot cannot both succeed. External failures never undo the
    internal commit; they are reported on the returned BookingOutcome.
    """

    def __init__(
        self,
        store: SlotStorePort,
        calendar: CalendarPort,
        notifier: NotifierPort,
        timezone: ZoneInfo,
        slot_minutes: int = 60,
    ) -> None:
        self._store = store
        self._calendar = calendar
        self._notifier = notifier
        self._timezone = timezone
        self._slot_minutes = slot_minutes
        self._logger = logging.getLogger(__name__)

    def create_day(self, day: date, blocked_times: list[str] | tuple[str, ...] = ()) -> tuple[Day, bool]:
        blocked = tuple(normalize_time(t) for t in blocked_times)
        stored, created = self._store.create_day_if_absent(Day.materialize(day, blocked))
        self._logger.info(
            "Day materialized" if created else "Day already exists",
            extra={"date": day.isoformat(), "action": "create_day"},
        )
        return stored, created

    def book(
        self,
        day: date,
        time: str,
        name: str,
        email: str,
        company: str,
        subject: str,
    ) -> BookingOutcome:
        slot_time = normalize_time(time)
        name, email, company, subject = (
            (name or "").strip(),
            (email or "").strip(),
            (company or "").strip(),
            (subject or "").strip(),
        )
        missing = [label for label, value in (("name", name), ("email", email), ("subject", subject)) if not value]
        if missing:
            raise BookingValidationError(f"Missing booking fields: {', '.join(missing)}")
        if "@" not in email:
            raise BookingValidationError(f"Invalid email {email!r}")

        requested = Slot(time=slot_time).booked(name=name, email=email, company=company, subject=subject)
        try:
            previous, updated_day = self._store.update_slot(
                day, requested, expected_status=SlotStatus.AVAILABLE
            )
        except SlotConflictError as e:
            if e.current_status == SlotStatus.BOOKED:
                raise SlotConflictError(
                    f"Slot {day.isoformat()} {slot_time} is already booked", e.current_status
                ) from e
            raise SlotConflictError(
                f"Slot {day.isoformat()} {slot_time} is {e.current_status.value} and cannot be booked",
                e.current_status,
            ) from e

        self._logger.info(
            "Slot booked",
            extra={"date": day.isoformat(), "time": slot_time, "action": "book"},
        )

        side_effects: list[SideEffectOutcome] = []
        event_id = self._create_external_event(day, requested, side_effects)
        if event_id is not None:
            self._notify(
                requested.email,
                f"Meeting confirmed: {requested.subject}",
                (
                    f"Hi {requested.name},\n\n"
                    f"Your meeting \"{requested.subject}\" is confirmed for "
                    f"{day.isoformat()} at {slot_time} ({self._timezone.key}).\n"
                ),
                side_effects,
            )
        else:
            side_effects.append(
                SideEffectOutcome(
                    target=SideEffectTarget.EMAIL,
                    ok=False,
                    detail="not sent because the calendar event was not created",
                    skipped=True,
                )
            )

        return BookingOutcome(
            action="booked",
            day=updated_day,
            slot=requested,
            previous=previous,
            side_effects=tuple(side_effects),
            calendar_event_id=event_id,
        )

    def cancel(self, day: date, time: str) -> BookingOutcome:
        slot_time = normalize_time(time)
        stored_day = self._store.find_day(day)
        if stored_day is None or stored_day.slot_at(slot_time) is None:
            raise SlotNotFoundError(f"No schedule slot for {day.isoformat()} {slot_time}")

        try:
            previous, updated_day = self._store.update_slot(
                day, stored_day.slot_at(slot_time).cleared(), expected_status=SlotStatus.BOOKED
            )
        except SlotConflictError:
            # Nothing booked: cancelling is an idempotent no-op.
            current_day = self._store.find_day(day) or stored_day
            current = current_day.slot_at(slot_time) or Slot(time=slot_time)
            self._logger.info(
                "Cancel on unbooked slot ignored",
                extra={"date": day.isoformat(), "time": slot_time, "action": "cancel"},
            )
            return BookingOutcome(action="noop", day=current_day, slot=current, previous=current)

        self._logger.info(
            "Slot cancelled",
            extra={"date": day.isoformat(), "time": slot_time, "action": "cancel"},
        )

        side_effects: list[SideEffectOutcome] = []
        self._delete_external_event(day, previous, side_effects)
        self._notify(
            previous.email,
            f"Meeting cancelled: {previous.subject}",
            (
                f"Hi {previous.name},\n\n"
                f"Your meeting \"{previous.subject}\" on {day.isoformat()} at {slot_time} "
                f"({self._timezone.key}) has been cancelled.\n"
            ),
            side_effects,
        )

        return BookingOutcome(
            action="cancelled",
            day=updated_day,
            slot=updated_day.slot_at(slot_time) or Slot(time=slot_time),
            previous=previous,
            side_effects=tuple(side_effects),
        )

    def _create_external_event(
        self, day: date, slot: Slot, side_effects: list[SideEffectOutcome]
    ) -> str | None:
        start, end = slot_window(day, slot.time, self._timezone, self._slot_minutes)
        description = f"Name: {slot.name}\nEmail: {slot.email}\nCompany: {slot.company}"
        try:
            event_id = self._calendar.create_event(
                subject=slot.subject,
                description=description,
                start=start,
                end=end,
                attendee_email=slot.email,
            )
        except Exception as e:
            self._logger.error(
                "Calendar event creation failed",
                extra={"date": day.isoformat(), "time": slot.time, "error": str(e)},
            )
            side_effects.append(
                SideEffectOutcome(target=SideEffectTarget.CALENDAR, ok=False, detail=str(e) or type(e).__name__)
            )
            return None

        self._logger.info(
            "Calendar event created",
            extra={"date": day.isoformat(), "time": slot.time, "event_id": event_id},
        )
        side_effects.append(SideEffectOutcome(target=SideEffectTarget.CALENDAR, ok=True))
        return event_id

    def _delete_external_event(self, day: date, previous: Slot, side_effects: list[SideEffectOutcome]) -> None:
        start, end = slot_window(day, previous.time, self._timezone, self._slot_minutes)
        try:
            match = self._find_matching_event(self._calendar.list_events(day), previous, start, end)
            if match is None:
                self._logger.info(
                    "No matching calendar event to delete",
                    extra={"date": day.isoformat(), "time": previous.time},
                )
                side_effects.append(
                    SideEffectOutcome(
                        target=SideEffectTarget.CALENDAR,
                        ok=True,
                        detail="no matching calendar event",
                        skipped=True,
                    )
                )
                return
            self._calendar.delete_event(match.event_id)
        except Exception as e:
            self._logger.error(
                "Calendar event deletion failed",
                extra={"date": day.isoformat(), "time": previous.time, "error": str(e)},
            )
            side_effects.append(
                SideEffectOutcome(target=SideEffectTarget.CALENDAR, ok=False, detail=str(e) or type(e).__name__)
            )
            return

        self._logger.info(
            "Calendar event deleted",
            extra={"date": day.isoformat(), "time": previous.time, "event_id": match.event_id},
        )
        side_effects.append(SideEffectOutcome(target=SideEffectTarget.CALENDAR, ok=True))

    def _find_matching_event(
        self, events: list[ExternalEvent], previous: Slot, start: datetime, end: datetime
    ) -> ExternalEvent | None:
        for event in events:
            event_start = event.start if event.start.tzinfo else event.start.replace(tzinfo=self._timezone)
            if not (start <= event_start < end):
                continue
            if event.has_attendee(previous.email) and event.summary == previous.subject:
                return event
        return None

    def _notify(self, to_email: str, subject: str, body: str, side_effects: list[SideEffectOutcome]) -> None:
        try:
            self._notifier.send(to_email=to_email, subject=subject, body=body)
        except Exception as e:
            self._logger.error("Notification failed", extra={"error": str(e)})
            side_effects.append(
                SideEffectOutcome(target=SideEffectTarget.EMAIL, ok=False, detail=str(e) or type(e).__name__)
            )
            return
        side_effects.append(SideEffectOutcome(target=SideEffectTarget.EMAIL, ok=True))
