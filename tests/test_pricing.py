"""Tests for model token pricing and token estimates."""

import pytest

from playground_pricing.services.llm import (
    ModelPricing,
    calculate_message_cost,
    estimate_messages_token_count,
    estimate_token_count,
    format_cost,
    format_tokens,
    get_model_pricing,
)
from playground_pricing.services.llm.pricing import MODEL_PRICING, list_priced_models


class TestModelPricing:
    """Tests for ModelPricing dataclass."""

    def test_compute_cost_basic(self) -> None:
        """Test basic cost computation per million tokens."""
        pricing = ModelPricing(input=0.59, output=0.79)
        # 1M prompt tokens * 0.59 + 500k completion tokens * 0.79
        cost = pricing.compute_cost(prompt_tokens=1_000_000, completion_tokens=500_000)
        assert cost.input_cost == pytest.approx(0.59)
        assert cost.output_cost == pytest.approx(0.395)
        assert cost.total_cost == pytest.approx(0.985)

    def test_compute_cost_zero_tokens(self) -> None:
        """Test cost with zero tokens."""
        cost = ModelPricing(input=1.0, output=3.0).compute_cost(0, 0)
        assert cost.total_cost == 0.0

    def test_compute_cost_free_model(self) -> None:
        """Test cost for free model (zero pricing)."""
        cost = ModelPricing(input=0.0, output=0.0).compute_cost(1000, 500)
        assert cost.total_cost == 0.0
        assert cost.input_tokens == 1000
        assert cost.output_tokens == 500


class TestPricingTable:
    """Tests for the static pricing table."""

    def test_known_model(self) -> None:
        """Known models return their listed rates."""
        pricing = get_model_pricing("llama-3.1-8b-instant")
        assert pricing.exists is True
        assert pricing.input == 0.05
        assert pricing.output == 0.08

    def test_unknown_model_is_free(self) -> None:
        """Unknown models price at zero and are flagged."""
        pricing = get_model_pricing("unknown-model")
        assert pricing.exists is False
        assert pricing.input == 0.0
        assert pricing.output == 0.0

    def test_lookup_is_exact(self) -> None:
        """Lookup does not match on prefixes or case."""
        assert get_model_pricing("LLAMA-3.1-8B-INSTANT").exists is False
        assert get_model_pricing("llama-3.1-8b").exists is False

    def test_rates_are_non_negative(self) -> None:
        """No model has a negative rate."""
        for pricing in MODEL_PRICING.values():
            assert pricing.input >= 0
            assert pricing.output >= 0

    def test_list_priced_models(self) -> None:
        """Every table entry is listed."""
        assert set(list_priced_models()) == set(MODEL_PRICING)


class TestCalculateMessageCost:
    """Tests for calculate_message_cost."""

    def test_known_model(self) -> None:
        """Cost follows the model's rates."""
        cost = calculate_message_cost("moonshotai/kimi-k2-instruct-0905", 2000, 1000)
        assert cost.input_cost == pytest.approx(0.002)
        assert cost.output_cost == pytest.approx(0.003)
        assert cost.total_cost == pytest.approx(0.005)

    def test_unknown_model_costs_nothing(self) -> None:
        """Unknown models never raise."""
        cost = calculate_message_cost("acme/unreleased", 5000, 5000)
        assert cost.total_cost == 0.0
        assert cost.input_tokens == 5000

    def test_cached_tokens_recorded_not_billed(self) -> None:
        """Cached tokens are carried through without changing the cost."""
        without = calculate_message_cost("qwen/qwen3-32b", 1000, 100)
        cached = calculate_message_cost("qwen/qwen3-32b", 1000, 100, cached_tokens=400)
        assert cached.cached_tokens == 400
        assert cached.total_cost == pytest.approx(without.total_cost)

    def test_negative_tokens_clamped(self) -> None:
        """Negative token counts never produce negative costs."""
        cost = calculate_message_cost("openai/gpt-oss-120b", -10, -5)
        assert cost.total_cost == 0.0


class TestFormatting:
    """Tests for display helpers."""

    def test_format_cost(self) -> None:
        """Zero is free, tiny costs show a floor, others four decimals."""
        assert format_cost(0) == "Free"
        assert format_cost(0.00001) == "< $0.0001"
        assert format_cost(0.0123456) == "$0.0123"
        assert format_cost(1.5, decimals=2) == "$1.50"

    def test_format_tokens(self) -> None:
        """Token counts get thousands separators."""
        assert format_tokens(0) == "0"
        assert format_tokens(1234567) == "1,234,567"


class TestTokenEstimates:
    """Tests for character-based token estimates."""

    def test_blank_text(self) -> None:
        """Empty and whitespace-only text has no tokens."""
        assert estimate_token_count(None) == 0
        assert estimate_token_count("") == 0
        assert estimate_token_count("   ") == 0

    def test_rounds_up(self) -> None:
        """Four characters per token, rounded up."""
        assert estimate_token_count("abcd") == 1
        assert estimate_token_count("abcde") == 2

    def test_messages_include_overhead(self) -> None:
        """Each message adds a fixed overhead."""
        messages = [
            {"role": "system", "content": "abcd"},
            {"role": "user", "content": "abcdefgh"},
        ]
        assert estimate_messages_token_count(messages) == (1 + 4) + (2 + 4)
