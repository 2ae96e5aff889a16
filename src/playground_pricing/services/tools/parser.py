"""Normalize executed-tools payloads into ToolUsage records.

The provider attaches an ``executed_tools`` list to compound-model responses.
Each entry carries a ``type``, JSON-encoded ``arguments``, an ``output`` and an
``index``, for example::

    {
        "type": "browser_search",
        "arguments": "{\\"action\\":\\"search\\",\\"query\\":\\"...\\"}",
        "output": "...",
        "index": 0
    }

Callers may hand over the JSON text, a single decoded entry, or the decoded
list. The shape is resolved once into a ``RawPayload`` variant before parsing.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from .costs import (
    ACTION_OPEN,
    ACTION_PYTHON,
    ACTION_SEARCH,
    BROWSER_SEARCH,
    CODE_INTERPRETER,
    ToolUsage,
)

logger = structlog.get_logger()

PYTHON_TOOL_TYPES = frozenset({CODE_INTERPRETER, "python"})
DEFAULT_DURATION_SECONDS = 1


@dataclass(frozen=True)
class JsonText:
    """Payload still encoded as JSON text."""

    text: str


@dataclass(frozen=True)
class Parsed:
    """A single decoded executed-tool entry."""

    record: dict[str, Any]


@dataclass(frozen=True)
class ParsedList:
    """A decoded list of executed-tool entries."""

    records: list[Any]


RawPayload = JsonText | Parsed | ParsedList


def to_payload(raw: Any) -> RawPayload | None:
    """Resolve an arbitrary executed-tools value into a RawPayload variant.

    Args:
        raw: JSON text, a mapping, a list, a RawPayload, or None.

    Returns:
        The matching variant, or None when there is nothing to parse.
    """
    if isinstance(raw, JsonText | Parsed | ParsedList):
        return raw
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        return JsonText(raw)
    if isinstance(raw, Mapping):
        return Parsed(dict(raw))
    if isinstance(raw, list | tuple):
        return ParsedList(list(raw))

    logger.warning("executed_tools_unsupported", value_type=type(raw).__name__)
    return None


def parse_tool_calls(raw: Any) -> list[ToolUsage]:
    """Parse an executed-tools payload into normalized tool usages.

    Never raises: malformed JSON yields an empty list.

    Args:
        raw: Executed-tools payload in any supported shape.

    Returns:
        One ToolUsage per executed tool, in payload order.
    """
    payload = to_payload(raw)
    if payload is None:
        return []

    if isinstance(payload, JsonText):
        try:
            decoded = json.loads(payload.text)
        except json.JSONDecodeError as e:
            logger.error("executed_tools_parse_failed", error=str(e))
            return []
        payload = to_payload(decoded)
        if payload is None or isinstance(payload, JsonText):
            return []

    if isinstance(payload, ParsedList):
        usages = []
        for index, record in enumerate(payload.records):
            if not isinstance(record, Mapping):
                logger.warning("executed_tool_skipped", index=index)
                continue
            usages.append(_to_usage(record))
        return usages

    if not payload.record.get("type"):
        return []
    return [_to_usage(payload.record)]


def _to_usage(record: Mapping[str, Any]) -> ToolUsage:
    """Map one executed-tool entry onto a ToolUsage."""
    tool_type = str(record.get("type") or "")
    arguments = _parse_arguments(record.get("arguments"))

    if tool_type == BROWSER_SEARCH:
        action = ACTION_OPEN if arguments.get("action") == "open" else ACTION_SEARCH
        return ToolUsage(tool=BROWSER_SEARCH, action=action, count=1)

    if tool_type in PYTHON_TOOL_TYPES:
        duration = (
            _as_seconds(arguments.get("duration"))
            or _as_seconds(record.get("execution_time"))
            or DEFAULT_DURATION_SECONDS
        )
        return ToolUsage(tool=CODE_INTERPRETER, action=ACTION_PYTHON, duration=duration)

    logger.warning("tool_unknown", tool_type=tool_type)
    return ToolUsage(tool=tool_type, count=1)


def _parse_arguments(arguments: Any) -> dict[str, Any]:
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            logger.warning("tool_arguments_parse_failed", error=str(e))
            return {}
    return dict(arguments) if isinstance(arguments, Mapping) else {}


def _as_seconds(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, int | float) or not math.isfinite(value):
        return None
    return value if value > 0 else None
