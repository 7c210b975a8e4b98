from abc import ABC, abstractmethod

from app.domain.entities.message import ChatMessage
from app.domain.entities.reply import AgentTurn


class LLMPort(ABC):
    @abstractmethod
    def plan_turn(self, messages: list[ChatMessage]) -> AgentTurn:
        """
        Ask the model for the next assistant turn.

        Requirements:
        - Return the assistant text (may be empty when tools are called)
        - Return zero or more tool calls, in the order the model emitted them
        - Tool call arguments are a dict, or the raw JSON text when the model
          produced something undecodable (the dispatcher rejects that call alone)

        Raises:
            LLMUpstreamError: networking/provider failures
            LLMContractError: a completion with neither text nor tool calls
        """
        raise NotImplementedError
