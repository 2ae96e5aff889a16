"""Approximate token counting.

Real counts come from the provider's usage block; these estimates cover
previews before a request is sent (~4 characters per token).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD_TOKENS = 4


def estimate_token_count(text: str | None) -> int:
    """Estimate token count for a piece of text."""
    if not text or not text.strip():
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_messages_token_count(messages: Iterable[Mapping[str, str]]) -> int:
    """Estimate token count for chat messages, including per-message overhead."""
    return sum(
        estimate_token_count(message.get("content", "")) + MESSAGE_OVERHEAD_TOKENS
        for message in messages
    )
