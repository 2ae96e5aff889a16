from .costs import (
    ToolCostBreakdown,
    ToolCostTotal,
    ToolUsage,
    calculate_tool_cost,
    calculate_total_tool_costs,
    format_tool_cost,
    format_tool_name,
)
from .parser import JsonText, Parsed, ParsedList, RawPayload, parse_tool_calls, to_payload

__all__ = [
    "JsonText",
    "Parsed",
    "ParsedList",
    "RawPayload",
    "ToolCostBreakdown",
    "ToolCostTotal",
    "ToolUsage",
    "calculate_tool_cost",
    "calculate_total_tool_costs",
    "format_tool_cost",
    "format_tool_name",
    "parse_tool_calls",
    "to_payload",
]
