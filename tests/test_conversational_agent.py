"""
Tests for the conversational agent turn: LLM tool calls -> dispatcher -> reply.
"""

from __future__ import annotations

import pytest

from app.application.exceptions import LLMUpstreamError
from app.application.ports.llm import LLMPort
from app.application.use_cases.conversational_agent import ConversationalAgentUseCase
from app.domain.entities.message import ChatMessage
from app.domain.entities.reply import AgentTurn, ToolCall
from app.infrastructure.llm.openai_llm import OpenAILLM

from conftest import DAY, TZ, fake_openai_client


class ScriptedLLM(LLMPort):
    def __init__(self, turn: AgentTurn | Exception) -> None:
        self._turn = turn
        self.seen: list[list[ChatMessage]] = []

    def plan_turn(self, messages: list[ChatMessage]) -> AgentTurn:
        self.seen.append(messages)
        if isinstance(self._turn, Exception):
            raise self._turn
        return self._turn


def test_text_only_turn_is_returned_verbatim(dispatcher):
    """A turn without tool calls returns the model text as is."""
    uc = ConversationalAgentUseCase(llm=ScriptedLLM(AgentTurn(text="Which day suits you?")), dispatcher=dispatcher)

    reply = uc.respond([ChatMessage(role="user", content="hi")])

    assert reply.text == "Which day suits you?"
    assert reply.envelopes == []


def test_tool_calls_are_dispatched_in_order(dispatcher, booking, store):
    """Tool calls are applied in the order the model emitted them."""
    booking.create_day(DAY)
    turn = AgentTurn(
        text="Done.",
        tool_calls=[
            ToolCall(
                name="bookSlot",
                arguments={
                    "date": "2025-03-10",
                    "time": "15:00",
                    "name": "Ana",
                    "email": "ana@x.com",
                    "company": "Acme",
                    "subject": "Demo",
                    "checkout": True,
                    "confirmation": True,
                },
            ),
            ToolCall(name="getScheduleByDate", arguments={"date": "2025-03-10"}),
        ],
    )
    uc = ConversationalAgentUseCase(llm=ScriptedLLM(turn), dispatcher=dispatcher)

    reply = uc.respond([ChatMessage(role="user", content="yes, book it")])

    assert store.find_day(DAY).slot_at("15:00").is_booked
    assert [e["functionResult"]["type"] for e in reply.envelopes] == ["booking", "schedule"]
    assert reply.text.startswith("Done.\n\nYour meeting \"Demo\" is booked")
    assert reply.meta == {"tool_calls": 2, "errors": 0, "call_ids": []}


def test_unconfirmed_tool_call_counts_as_error(dispatcher, booking, store):
    """A held mutating call counts toward meta errors."""
    booking.create_day(DAY)
    turn = AgentTurn(
        text="",
        tool_calls=[ToolCall(name="cancelBooking", arguments={"date": "2025-03-10", "time": "09:00"})],
    )
    uc = ConversationalAgentUseCase(llm=ScriptedLLM(turn), dispatcher=dispatcher)

    reply = uc.respond([ChatMessage(role="user", content="cancel my 9am")])

    assert reply.text == "Please confirm: cancel the booking on 2025-03-10 at 09:00?"
    assert reply.meta["errors"] == 1


def test_upstream_failure_propagates(dispatcher):
    """Provider failures reach the caller unchanged."""
    uc = ConversationalAgentUseCase(llm=ScriptedLLM(LLMUpstreamError("boom")), dispatcher=dispatcher)

    with pytest.raises(LLMUpstreamError):
        uc.respond([ChatMessage(role="user", content="hi")])


def test_undecodable_arguments_fail_only_their_call(dispatcher, booking, store):
    """A tool call with broken JSON is rejected on its own envelope; siblings still run."""
    booking.create_day(DAY)
    turn = AgentTurn(
        text="",
        tool_calls=[
            ToolCall(name="getScheduleByDate", arguments={"date": "2025-03-10"}),
            ToolCall(name="bookSlot", arguments='{"date": "2025-03-10", "time": '),
        ],
    )
    uc = ConversationalAgentUseCase(llm=ScriptedLLM(turn), dispatcher=dispatcher)

    reply = uc.respond([ChatMessage(role="user", content="what is free, and book 9am")])

    schedule, booking_env = reply.envelopes
    assert "error" not in schedule
    assert schedule["functionResult"]["message"].startswith("Schedule for 2025-03-10: 8 of 8")
    assert booking_env["functionResult"]["type"] == "booking"
    assert booking_env["error"]["type"] == "ValidationError"
    assert booking_env["error"]["status"] == 400
    assert reply.meta["errors"] == 1
    assert not store.find_day(DAY).slot_at("09:00").is_booked


def test_openai_adapter_hands_raw_arguments_to_dispatcher(dispatcher, booking):
    """The OpenAI adapter passes undecodable arguments through instead of failing the turn."""
    booking.create_day(DAY)
    client = fake_openai_client(
        [
            ("call_1", "getScheduleByDate", '{"date": "2025-03-10"}'),
            ("call_2", "bookSlot", '{"date": "2025-03-10", "time": '),
        ]
    )
    uc = ConversationalAgentUseCase(llm=OpenAILLM(timezone=TZ, client=client), dispatcher=dispatcher)

    reply = uc.respond([ChatMessage(role="user", content="what is free, and book 9am")])

    assert [e["functionResult"]["type"] for e in reply.envelopes] == ["schedule", "booking"]
    assert "error" not in reply.envelopes[0]
    assert reply.envelopes[1]["error"]["type"] == "ValidationError"
    assert reply.meta["call_ids"] == ["call_1", "call_2"]
