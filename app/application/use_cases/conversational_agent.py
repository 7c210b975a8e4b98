from __future__ import annotations

import logging

from app.application.dto.tool_call import ToolCallDTO
from app.application.ports.llm import LLMPort
from app.application.use_cases.agent_dispatcher import AgentIntentDispatcher
from app.domain.entities.message import ChatMessage
from app.domain.entities.reply import Reply


class ConversationalAgentUseCase:
    def __init__(self, llm: LLMPort, dispatcher: AgentIntentDispatcher) -> None:
        self._llm = llm
        self._dispatcher = dispatcher
        self._logger = logging.getLogger(__name__)

    def respond(self, messages: list[ChatMessage]) -> Reply:
        turn = self._llm.plan_turn(messages)
        if not turn.tool_calls:
            return Reply(text=turn.text, envelopes=[], meta={"tool_calls": 0})

        calls = [ToolCallDTO(name=c.name, arguments=c.arguments) for c in turn.tool_calls]
        results = self._dispatcher.dispatch_all(calls)
        self._logger.info(
            "Agent turn dispatched",
            extra={"action": ",".join(c.name for c in calls)},
        )

        summary = " ".join(r.message for r in results if r.message)
        text = f"{turn.text}\n\n{summary}".strip() if turn.text else summary
        return Reply(
            text=text,
            envelopes=[r.to_envelope() for r in results],
            meta={
                "tool_calls": len(calls),
                "errors": sum(1 for r in results if r.error is not None),
                "call_ids": [c.call_id for c in turn.tool_calls if c.call_id],
            },
        )
