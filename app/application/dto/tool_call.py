from __future__ import annotations

import json
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from app.application.exceptions import BookingValidationError
from app.domain.entities.intent import Intent, IntentAction

_TRUE_STRINGS = {"true", "yes", "1", "y", "si", "sí"}


class ToolCallDTO(BaseModel):
    """One tool call as emitted by the conversational layer."""

    name: str = Field(validation_alias=AliasChoices("name", "action"))
    arguments: dict[str, Any] | str = Field(default_factory=dict)
    checkout: bool | None = None
    confirmation: bool | None = None

    def decoded_arguments(self) -> dict[str, Any]:
        if isinstance(self.arguments, dict):
            return dict(self.arguments)
        text = self.arguments.strip()
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise BookingValidationError(f"Tool call arguments are not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise BookingValidationError("Tool call arguments must be a JSON object")
        return data

    def to_intent(self) -> Intent:
        try:
            action = IntentAction(self.name)
        except ValueError as e:
            allowed = ", ".join(a.value for a in IntentAction)
            raise BookingValidationError(f"Unknown action {self.name!r}; expected one of {allowed}") from e

        args = self.decoded_arguments()
        # The gate flags may travel inside the arguments; explicit fields win.
        checkout = _as_bool(args.pop("checkout", None))
        confirmation = _as_bool(args.pop("confirmation", None))
        if self.checkout is not None:
            checkout = self.checkout
        if self.confirmation is not None:
            confirmation = self.confirmation

        return Intent(action=action, arguments=args, checkout=checkout, confirmation=confirmation)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False
