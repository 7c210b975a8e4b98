from __future__ import annotations

from app.domain.entities.schedule import SlotStatus


class SchedulingError(RuntimeError):
    """Base class for failures a caller of the scheduling core can act on."""

    error_type = "UnexpectedError"
    status_code = 500


class SlotNotFoundError(SchedulingError):
    """Raised when no Day record exists for the date, or the Day has no slot at the time."""

    error_type = "NotFound"
    status_code = 404


class SlotConflictError(SchedulingError):
    """Raised when a conditional slot update finds the slot in an unexpected status."""

    error_type = "Conflict"
    status_code = 409

    def __init__(self, message: str, current_status: SlotStatus) -> None:
        super().__init__(message)
        self.current_status = current_status


class BookingValidationError(SchedulingError):
    """Raised before any mutation for malformed input or a missing confirmation gate."""

    error_type = "ValidationError"
    status_code = 400


class ExternalSyncError(SchedulingError):
    """Raised by calendar/notifier adapters; never fatal to an internal commit."""

    error_type = "ExternalSyncFailure"
    status_code = 200


class LLMUpstreamError(RuntimeError):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass
