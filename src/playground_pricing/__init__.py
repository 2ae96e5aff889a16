"""Playground Pricing.

Tool-cost calculation, model-capability detection and cost analytics
for a hosted LLM chat playground.
"""

from playground_pricing.services.llm.capabilities import get_model_display_name, get_model_metadata
from playground_pricing.services.llm.pricing import calculate_message_cost
from playground_pricing.services.tools import calculate_total_tool_costs, parse_tool_calls

__version__ = "0.3.0"
__all__ = [
    "__version__",
    "calculate_message_cost",
    "calculate_total_tool_costs",
    "get_model_display_name",
    "get_model_metadata",
    "parse_tool_calls",
]
