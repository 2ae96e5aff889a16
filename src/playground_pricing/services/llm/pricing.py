"""Model token pricing.

The provider API does not expose pricing, so rates are maintained by hand
from the provider's pricing page. Values are USD per 1M tokens.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

logger = structlog.get_logger()

TOKENS_PER_UNIT = 1_000_000
MIN_DISPLAY_COST = 0.0001


@dataclass(frozen=True)
class ModelPricing:
    """Pricing info for a single model."""

    input: float  # USD per 1M prompt tokens
    output: float  # USD per 1M completion tokens
    exists: bool = True

    def compute_cost(self, prompt_tokens: int, completion_tokens: int) -> CostBreakdown:
        """Compute cost for a request.

        Args:
            prompt_tokens: Number of input tokens.
            completion_tokens: Number of output tokens.

        Returns:
            CostBreakdown in USD.
        """
        input_cost = (prompt_tokens / TOKENS_PER_UNIT) * self.input
        output_cost = (completion_tokens / TOKENS_PER_UNIT) * self.output
        return CostBreakdown(
            input_cost=input_cost,
            output_cost=output_cost,
            total_cost=input_cost + output_cost,
            input_tokens=prompt_tokens,
            output_tokens=completion_tokens,
        )


@dataclass(frozen=True)
class CostBreakdown:
    """Token cost of a single message."""

    input_cost: float
    output_cost: float
    total_cost: float
    input_tokens: int
    output_tokens: int
    cached_tokens: int = 0


MODEL_PRICING: dict[str, ModelPricing] = {
    # Compound systems bill pass-through (underlying models + tools)
    "groq/compound": ModelPricing(input=0.0, output=0.0),
    "groq/compound-mini": ModelPricing(input=0.0, output=0.0),
    # Text
    "llama-3.1-8b-instant": ModelPricing(input=0.05, output=0.08),
    "llama-3.3-70b-versatile": ModelPricing(input=0.59, output=0.79),
    "meta-llama/llama-guard-4-12b": ModelPricing(input=0.2, output=0.2),
    "meta-llama/llama-4-maverick-17b-128e-instruct": ModelPricing(input=0.2, output=0.6),
    "meta-llama/llama-4-scout-17b-16e-instruct": ModelPricing(input=0.11, output=0.34),
    "meta-llama/llama-prompt-guard-2-22m": ModelPricing(input=0.03, output=0.03),
    "meta-llama/llama-prompt-guard-2-86m": ModelPricing(input=0.04, output=0.04),
    "moonshotai/kimi-k2-instruct-0905": ModelPricing(input=1.0, output=3.0),
    "qwen/qwen3-32b": ModelPricing(input=0.29, output=0.59),
    "openai/gpt-oss-120b": ModelPricing(input=0.15, output=0.75),
    "openai/gpt-oss-20b": ModelPricing(input=0.1, output=0.5),
    # Speech-to-text bills per hour of audio, not per token
    "whisper-large-v3": ModelPricing(input=0.0, output=0.0),
    "whisper-large-v3-turbo": ModelPricing(input=0.0, output=0.0),
    # Text-to-speech bills per 1M characters
    "playai-tts": ModelPricing(input=50.0, output=0.0),
    "playai-tts-arabic": ModelPricing(input=50.0, output=0.0),
}

UNKNOWN_PRICING = ModelPricing(input=0.0, output=0.0, exists=False)


def get_model_pricing(model_id: str) -> ModelPricing:
    """Get pricing for a model by exact identifier.

    Args:
        model_id: Provider model ID.

    Returns:
        ModelPricing, zero-priced with exists=False when unknown.
    """
    return MODEL_PRICING.get(model_id, UNKNOWN_PRICING)


def calculate_message_cost(
    model: str,
    prompt_tokens: int,
    completion_tokens: int,
    cached_tokens: int = 0,
) -> CostBreakdown:
    """Calculate token cost for a single message.

    Args:
        model: Provider model ID.
        prompt_tokens: Number of input tokens.
        completion_tokens: Number of output tokens.
        cached_tokens: Number of cached prompt tokens (recorded, not billed).

    Returns:
        CostBreakdown; all costs are zero for unknown models.
    """
    pricing = get_model_pricing(model)
    if not pricing.exists:
        logger.warning("pricing_unknown", model_id=model)

    breakdown = pricing.compute_cost(max(prompt_tokens, 0), max(completion_tokens, 0))
    return replace(breakdown, cached_tokens=cached_tokens)


def list_priced_models() -> list[str]:
    """List all model IDs with known pricing."""
    return list(MODEL_PRICING.keys())


def format_cost(cost: float, decimals: int = 4) -> str:
    """Format a cost in dollars for display."""
    if cost == 0:
        return "Free"
    if cost < MIN_DISPLAY_COST:
        return "< $0.0001"
    return f"${cost:.{decimals}f}"


def format_tokens(tokens: int) -> str:
    """Format a token count with thousands separators."""
    return f"{tokens:,}"
