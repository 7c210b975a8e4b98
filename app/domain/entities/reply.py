from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolCall:
    name: str
    # Raw JSON text when the model emitted arguments that could not be decoded.
    arguments: dict[str, Any] | str
    call_id: str | None = None


@dataclass(frozen=True)
class AgentTurn:
    """What the language model decided for one conversational turn."""

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass(frozen=True)
class Reply:
    text: str
    envelopes: list[dict[str, Any]]
    meta: dict[str, Any]
