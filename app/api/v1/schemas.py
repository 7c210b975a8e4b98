from typing import Any, Literal

from pydantic import BaseModel, Field

from app.application.dto.tool_call import ToolCallDTO


class SlotSchema(BaseModel):
    time: str
    status: Literal["available", "booked", "blocked"]
    name: str = ""
    email: str = ""
    company: str = ""
    subject: str = ""


class DayResponseSchema(BaseModel):
    date: str
    slots: list[SlotSchema]
    calendar_error: str | None = None


class CreateDayRequestSchema(BaseModel):
    date: str
    blocked_times: list[str] = Field(default_factory=list)


class CreateDayResponseSchema(DayResponseSchema):
    created: bool


class BookRequestSchema(BaseModel):
    date: str
    time: str
    name: str
    email: str
    company: str = ""
    subject: str


class CancelRequestSchema(BaseModel):
    date: str
    time: str


class SideEffectSchema(BaseModel):
    target: Literal["calendar", "email"]
    ok: bool
    skipped: bool = False
    detail: str | None = None


class BookingResponseSchema(BaseModel):
    action: Literal["booked", "cancelled", "noop"]
    date: str
    slot: SlotSchema
    day: DayResponseSchema
    calendar_event_id: str | None = None
    calendar_error: str | None = None
    email_error: str | None = None
    side_effects: list[SideEffectSchema] = Field(default_factory=list)


class AgentRequestSchema(BaseModel):
    intent: ToolCallDTO | None = None
    intents: list[ToolCallDTO] = Field(default_factory=list)


class ChatMessageSchema(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ConversationRequestSchema(BaseModel):
    messages: list[ChatMessageSchema] = Field(min_length=1)


class ConversationResponseSchema(BaseModel):
    reply: str
    results: list[dict[str, Any]] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)
