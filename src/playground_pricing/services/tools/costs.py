"""Provider built-in tool pricing.

Browser Search - Basic Search: $5 / 1000 requests (browser_search, browser.search)
Browser Search - Visit Website: $1 / 1000 requests (browser_search, browser.open)
Code Execution - Python: $0.18 / hour (code_interpreter, python)
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

BROWSER_SEARCH = "browser_search"
CODE_INTERPRETER = "code_interpreter"

ACTION_SEARCH = "browser.search"
ACTION_OPEN = "browser.open"
ACTION_PYTHON = "python"

# USD per unit
BROWSER_SEARCH_PRICE = 5 / 1000  # per request
BROWSER_OPEN_PRICE = 1 / 1000  # per request
CODE_INTERPRETER_PRICE = 0.18 / 3600  # per second

MIN_DISPLAY_COST = 0.0001


@dataclass(frozen=True)
class ToolUsage:
    """One normalized billable tool invocation."""

    tool: str
    action: str | None = None
    count: int | None = None  # request-based tools
    duration: float | None = None  # time-based tools, seconds


@dataclass(frozen=True)
class ToolCostBreakdown:
    """A tool usage with its computed cost."""

    tool: str
    action: str | None = None
    count: int | None = None
    duration: float | None = None
    cost: float = 0.0


@dataclass(frozen=True)
class ToolCostTotal:
    """Total tool cost with per-usage breakdown in input order."""

    total: float = 0.0
    breakdown: list[ToolCostBreakdown] = field(default_factory=list)


def calculate_tool_cost(usage: ToolUsage) -> float:
    """Compute the cost of a single tool usage.

    Unknown tools, and usages without a positive finite billable quantity,
    cost nothing.

    Args:
        usage: Normalized tool usage.

    Returns:
        Cost in USD.
    """
    if usage.tool == BROWSER_SEARCH:
        if not _billable(usage.count):
            return 0.0
        if usage.action == ACTION_OPEN:
            return usage.count * BROWSER_OPEN_PRICE
        # Unspecified or unrecognized actions bill at the search rate
        return usage.count * BROWSER_SEARCH_PRICE

    if usage.tool == CODE_INTERPRETER:
        if not _billable(usage.duration):
            return 0.0
        return usage.duration * CODE_INTERPRETER_PRICE

    return 0.0


def calculate_total_tool_costs(usages: Iterable[ToolUsage]) -> ToolCostTotal:
    """Compute costs for a batch of tool usages.

    Args:
        usages: Tool usages in the order they were executed.

    Returns:
        ToolCostTotal whose breakdown preserves input order.
    """
    breakdown: list[ToolCostBreakdown] = []
    total = 0.0

    for usage in usages:
        cost = calculate_tool_cost(usage)
        total += cost
        breakdown.append(
            ToolCostBreakdown(
                tool=usage.tool,
                action=usage.action,
                count=usage.count,
                duration=usage.duration,
                cost=cost,
            )
        )

    return ToolCostTotal(total=total, breakdown=breakdown)


def format_tool_name(tool: str, action: str | None = None) -> str:
    """Human-readable tool label."""
    if tool == BROWSER_SEARCH:
        if action == ACTION_OPEN:
            return "Visit Website"
        return "Browser Search"
    if tool == CODE_INTERPRETER:
        return "Code Execution (Python)"
    return tool


def format_tool_cost(cost: float) -> str:
    """Format a tool cost for display."""
    if cost < MIN_DISPLAY_COST:
        return "<$0.0001"
    return f"${cost:.4f}"


def _billable(quantity: float | None) -> bool:
    return quantity is not None and math.isfinite(quantity) and quantity > 0
