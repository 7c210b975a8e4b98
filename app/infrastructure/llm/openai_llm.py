from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from openai import OpenAI

from app.application.exceptions import LLMContractError, LLMUpstreamError
from app.application.ports.llm import LLMPort
from app.core.config import settings
from app.domain.entities.message import ChatMessage
from app.domain.entities.reply import AgentTurn, ToolCall
from app.infrastructure.llm.prompts import AGENT_TOOLS, build_agent_system_prompt


class OpenAILLM(LLMPort):
    """
    OpenAI-backed adapter implementing LLMPort with chat-completions tool calling.

    Contract guarantees:
    - plan_turn returns AgentTurn; tool call arguments are passed on as raw JSON text
      and decoded per call by the dispatcher
    - Raises:
        LLMUpstreamError: networking/provider failures
        LLMContractError: empty or choiceless completions
    """

    def __init__(self, timezone: ZoneInfo, client: OpenAI | None = None) -> None:
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.EXTERNAL_TIMEOUT_SECONDS * 3)
        self._timezone = timezone

    def plan_turn(self, messages: list[ChatMessage]) -> AgentTurn:
        system_content = build_agent_system_prompt(
            today_iso=datetime.now(self._timezone).date().isoformat(),
            timezone_name=self._timezone.key,
        )
        payload: list[dict[str, Any]] = [{"role": "system", "content": system_content}]
        payload += [{"role": m.role, "content": m.content} for m in messages if m.role != "system"]

        try:
            resp = self.client.chat.completions.create(
                model=settings.OPENAI_MODEL_AGENT,
                messages=payload,
                temperature=settings.OPENAI_TEMPERATURE_AGENT,
                tools=AGENT_TOOLS,
                tool_choice="auto",
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        if not resp.choices:
            raise LLMContractError("LLM returned no choices.")

        message = resp.choices[0].message
        tool_calls: list[ToolCall] = []
        for call in message.tool_calls or []:
            tool_calls.append(
                ToolCall(
                    name=call.function.name,
                    arguments=call.function.arguments or {},
                    call_id=call.id,
                )
            )

        text = (message.content or "").strip()
        if not text and not tool_calls:
            raise LLMContractError("LLM returned neither text nor tool calls.")
        return AgentTurn(text=text, tool_calls=tool_calls)

