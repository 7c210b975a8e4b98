from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.application.dto.tool_call import ToolCallDTO
from app.application.exceptions import BookingValidationError, SchedulingError
from app.application.use_cases.booking import BookingStateMachine
from app.application.use_cases.schedule_view import ScheduleViewUseCase
from app.application.utils.schedule_times import normalize_time, parse_day
from app.application.utils.serialization import day_to_dict, outcome_to_dict
from app.domain.entities.booking_outcome import BookingOutcome
from app.domain.entities.intent import ConfirmationStage, Intent, IntentAction
from app.domain.entities.schedule import SlotStatus

FUNCTION_TYPES = {
    IntentAction.BOOK_SLOT: "booking",
    IntentAction.GET_SCHEDULE_BY_DATE: "schedule",
    IntentAction.CANCEL_BOOKING: "cancellation",
}

BOOKING_DONE = 'Your meeting "{subject}" is booked for {date} at {time} under {name} ({email}).'
BOOKING_PENDING = 'Please confirm: book "{subject}" on {date} at {time} for {name} ({email})?'
CANCEL_DONE = "The booking on {date} at {time} has been cancelled."
CANCEL_NOOP = "There was no booking on {date} at {time}, so there was nothing to cancel."
CANCEL_PENDING = "Please confirm: cancel the booking on {date} at {time}?"
SCHEDULE_SUMMARY = "Schedule for {date}: {available} of {total} slots available{times}."
CALENDAR_WARNING = " The calendar invite could not be updated ({error})."
EMAIL_WARNING = " The e-mail notification could not be sent ({error})."


@dataclass(frozen=True)
class DispatchResult:
    function_type: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    error: dict[str, Any] | None = None

    @property
    def status_code(self) -> int:
        if self.error is None:
            return 200
        return int(self.error.get("status", 500))

    def to_envelope(self) -> dict[str, Any]:
        envelope: dict[str, Any] = {
            "functionResult": {
                "type": self.function_type,
                "message": self.message,
                "data": self.data,
            }
        }
        if self.error is not None:
            envelope["error"] = self.error
        return envelope


class AgentIntentDispatcher:
    """
    Turns one agent Intent into exactly one schedule query or state transition.

    Mutating actions run only when the Intent reached the confirmed stage
    (checkout shown and user agreed). Nothing is retried.
    """

    def __init__(self, schedule_view: ScheduleViewUseCase, booking: BookingStateMachine) -> None:
        self._schedule_view = schedule_view
        self._booking = booking
        self._logger = logging.getLogger(__name__)

    def dispatch_tool_call(self, call: ToolCallDTO) -> DispatchResult:
        try:
            intent = call.to_intent()
        except BookingValidationError as e:
            return DispatchResult(
                function_type=_type_for_name(call.name),
                message=str(e),
                error=_error_dict(e),
            )
        return self.dispatch(intent)

    def dispatch_all(self, calls: list[ToolCallDTO]) -> list[DispatchResult]:
        # Sequential: each call may depend on the day state left by the previous one.
        return [self.dispatch_tool_call(call) for call in calls]

    def dispatch(self, intent: Intent) -> DispatchResult:
        function_type = FUNCTION_TYPES[intent.action]
        self._logger.info(
            "Dispatching intent",
            extra={"action": intent.action.value, "stage": intent.stage.value},
        )
        try:
            if intent.action == IntentAction.GET_SCHEDULE_BY_DATE:
                return self._get_schedule(intent)
            if intent.action == IntentAction.BOOK_SLOT:
                return self._book(intent)
            return self._cancel(intent)
        except SchedulingError as e:
            self._logger.info(
                "Intent rejected",
                extra={"action": intent.action.value, "error": str(e)},
            )
            return DispatchResult(function_type=function_type, message=str(e), error=_error_dict(e))
        except Exception as e:
            self._logger.exception("Unexpected error while dispatching intent", extra={"action": intent.action.value})
            return DispatchResult(
                function_type=function_type,
                message="Something went wrong while processing the request.",
                error={"type": "UnexpectedError", "message": f"Unexpected {type(e).__name__}", "status": 500},
            )

    def _get_schedule(self, intent: Intent) -> DispatchResult:
        day = parse_day(_require(intent.arguments, "date"))
        view = self._schedule_view.get_day(day)
        available = [s.time for s in view.slots if s.status == SlotStatus.AVAILABLE]
        message = SCHEDULE_SUMMARY.format(
            date=day.isoformat(),
            available=len(available),
            total=len(view.slots),
            times=f" ({', '.join(available)})" if available else "",
        )
        if view.calendar_error:
            message += CALENDAR_WARNING.format(error=view.calendar_error)
        return DispatchResult(function_type="schedule", message=message, data=day_to_dict(view))

    def _book(self, intent: Intent) -> DispatchResult:
        args = intent.arguments
        day = parse_day(_require(args, "date"))
        slot_time = normalize_time(_require(args, "time"))
        fields = {
            "date": day.isoformat(),
            "time": slot_time,
            "name": str(args.get("name") or "").strip(),
            "email": str(args.get("email") or "").strip(),
            "company": str(args.get("company") or "").strip(),
            "subject": str(args.get("subject") or "").strip(),
        }

        if intent.stage != ConfirmationStage.CONFIRMED:
            return self._pending("booking", BOOKING_PENDING.format(**fields), intent, fields)

        outcome = self._booking.book(
            day,
            slot_time,
            name=fields["name"],
            email=fields["email"],
            company=fields["company"],
            subject=fields["subject"],
        )
        return self._applied("booking", BOOKING_DONE.format(**fields), outcome)

    def _cancel(self, intent: Intent) -> DispatchResult:
        day = parse_day(_require(intent.arguments, "date"))
        slot_time = normalize_time(_require(intent.arguments, "time"))
        fields = {"date": day.isoformat(), "time": slot_time}

        if intent.stage != ConfirmationStage.CONFIRMED:
            return self._pending("cancellation", CANCEL_PENDING.format(**fields), intent, fields)

        outcome = self._booking.cancel(day, slot_time)
        template = CANCEL_DONE if outcome.changed else CANCEL_NOOP
        return self._applied("cancellation", template.format(**fields), outcome)

    def _pending(self, function_type: str, message: str, intent: Intent, fields: dict[str, Any]) -> DispatchResult:
        missing = [flag for flag in ("checkout", "confirmation") if not getattr(intent, flag)]
        self._logger.info(
            "Mutating intent held for confirmation",
            extra={"action": intent.action.value, "stage": intent.stage.value},
        )
        return DispatchResult(
            function_type=function_type,
            message=message,
            data={"stage": ConfirmationStage.PROPOSED.value, "pending": fields},
            error={
                "type": BookingValidationError.error_type,
                "message": f"Confirmation required before applying; missing: {', '.join(missing)}",
                "status": BookingValidationError.status_code,
            },
        )

    def _applied(self, function_type: str, message: str, outcome: BookingOutcome) -> DispatchResult:
        if outcome.calendar_error:
            message += CALENDAR_WARNING.format(error=outcome.calendar_error)
        if outcome.email_error:
            message += EMAIL_WARNING.format(error=outcome.email_error)
        data = outcome_to_dict(outcome)
        data["stage"] = ConfirmationStage.APPLIED.value
        return DispatchResult(function_type=function_type, message=message, data=data)


def _require(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if value is None or not str(value).strip():
        raise BookingValidationError(f"Missing required argument: {key}")
    return str(value)


def _error_dict(error: SchedulingError) -> dict[str, Any]:
    return {"type": error.error_type, "message": str(error), "status": error.status_code}


def _type_for_name(name: str) -> str:
    try:
        return FUNCTION_TYPES[IntentAction(name)]
    except ValueError:
        return "unknown"
