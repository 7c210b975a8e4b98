from __future__ import annotations

import re

from app.application.ports.llm import LLMPort
from app.domain.entities.message import ChatMessage
from app.domain.entities.reply import AgentTurn, ToolCall

_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")


class MockLLM(LLMPort):
    """Keyword-driven stand-in used when no OpenAI key is configured."""

    def plan_turn(self, messages: list[ChatMessage]) -> AgentTurn:
        last_user = next((m.content for m in reversed(messages) if m.role == "user"), "")
        normalized = last_user.lower()
        date_match = _DATE_RE.search(last_user)

        if date_match and any(word in normalized for word in ("schedule", "available", "free", "agenda", "disponible")):
            return AgentTurn(
                text="",
                tool_calls=[ToolCall(name="getScheduleByDate", arguments={"date": date_match.group(1)})],
            )

        return AgentTurn(
            text="I can check availability, book or cancel a meeting. Which date works for you (YYYY-MM-DD)?"
        )
