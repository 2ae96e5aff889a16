"""Cost tracking for playground chat messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from playground_pricing.services.tools import (
    ToolCostTotal,
    calculate_total_tool_costs,
    parse_tool_calls,
)

from .pricing import CostBreakdown, calculate_message_cost

if TYPE_CHECKING:
    from playground_pricing.models import ChatMessage
    from playground_pricing.services.storage import SessionRepository

logger = structlog.get_logger()


@dataclass(frozen=True)
class MessageCost:
    """Token and tool cost of one model response."""

    tokens: CostBreakdown
    tools: ToolCostTotal

    @property
    def total_cost(self) -> float:
        return self.tokens.total_cost + self.tools.total


def price_response(
    model: str,
    prompt_tokens: int,
    completion_tokens: int,
    cached_tokens: int = 0,
    executed_tools: Any = None,
) -> MessageCost:
    """Price a model response from its usage block and executed tools.

    Args:
        model: Provider model ID.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        cached_tokens: Number of cached prompt tokens.
        executed_tools: Raw executed-tools payload, if any.

    Returns:
        MessageCost combining token and tool costs.
    """
    tokens = calculate_message_cost(model, prompt_tokens, completion_tokens, cached_tokens)
    tools = calculate_total_tool_costs(parse_tool_calls(executed_tools))
    return MessageCost(tokens=tokens, tools=tools)


class CostTracker:
    """Prices model responses and records them against a session.

    Usage:
        tracker = CostTracker(session_repository)
        message, cost = await tracker.record_message(
            session_id, "assistant", content, model, prompt_tokens, completion_tokens
        )
    """

    def __init__(self, sessions: SessionRepository) -> None:
        """Initialize cost tracker.

        Args:
            sessions: Repository storing messages and session totals.
        """
        self._sessions = sessions

    async def record_message(
        self,
        session_id: str,
        role: str,
        content: str,
        model: str,
        prompt_tokens: int = 0,
        completion_tokens: int = 0,
        cached_tokens: int = 0,
        executed_tools: Any = None,
        reasoning: str | None = None,
        user_id: str | None = None,
    ) -> tuple[ChatMessage, MessageCost]:
        """Compute cost and store the message.

        Args:
            session_id: Owning session.
            role: Message role.
            content: Message text.
            model: Provider model ID used for the response.
            prompt_tokens: Number of prompt tokens.
            completion_tokens: Number of completion tokens.
            cached_tokens: Number of cached prompt tokens.
            executed_tools: Raw executed-tools payload, if any.
            reasoning: Optional reasoning trace.
            user_id: When given, the session must belong to this user.

        Returns:
            Stored message and its cost breakdown.
        """
        cost = price_response(
            model, prompt_tokens, completion_tokens, cached_tokens, executed_tools
        )

        message = await self._sessions.add_message(
            session_id,
            role,
            content,
            cost=cost.total_cost,
            input_tokens=prompt_tokens,
            output_tokens=completion_tokens,
            cached_tokens=cached_tokens,
            reasoning=reasoning,
            user_id=user_id,
        )

        logger.debug(
            "cost_recorded",
            model=model,
            role=role,
            token_cost=cost.tokens.total_cost,
            tool_cost=cost.tools.total,
            tools=len(cost.tools.breakdown),
        )
        return message, cost
