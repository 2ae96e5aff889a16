"""Tests for executed-tools payload parsing."""

import json

import pytest
import structlog
from structlog.testing import capture_logs

from playground_pricing.services.tools import ToolUsage, parse_tool_calls, parser
from playground_pricing.services.tools.parser import (
    JsonText,
    Parsed,
    ParsedList,
    to_payload,
)


class TestToPayload:
    """Tests for resolving raw values into payload variants."""

    def test_empty_values(self):
        """None and empty strings carry nothing to parse."""
        assert to_payload(None) is None
        assert to_payload("") is None

    def test_string_is_json_text(self):
        """Strings are treated as encoded JSON."""
        assert to_payload('{"type": "python"}') == JsonText('{"type": "python"}')

    def test_mapping_is_parsed(self):
        """Mappings are a single decoded entry."""
        assert to_payload({"type": "python"}) == Parsed({"type": "python"})

    def test_sequence_is_parsed_list(self):
        """Lists and tuples are decoded entry lists."""
        assert to_payload([{"type": "python"}]) == ParsedList([{"type": "python"}])
        assert to_payload(({"type": "python"},)) == ParsedList([{"type": "python"}])

    def test_variant_passes_through(self):
        """Already-resolved payloads are returned unchanged."""
        payload = Parsed({"type": "python"})
        assert to_payload(payload) is payload

    def test_unsupported_type(self):
        """Other types resolve to nothing."""
        assert to_payload(42) is None


class TestParseToolCalls:
    """Tests for parse_tool_calls."""

    def test_browser_open(self):
        """Open action maps to a website visit."""
        raw = '{"type":"browser_search","arguments":"{\\"action\\":\\"open\\"}"}'
        assert parse_tool_calls(raw) == [
            ToolUsage(tool="browser_search", action="browser.open", count=1)
        ]

    def test_browser_defaults_to_search(self):
        """Any other action maps to a search."""
        raw = {"type": "browser_search", "arguments": '{"action": "search", "query": "groq"}'}
        assert parse_tool_calls(raw) == [
            ToolUsage(tool="browser_search", action="browser.search", count=1)
        ]

    def test_code_interpreter_default_duration(self):
        """Missing duration defaults to one second."""
        raw = '{"type":"code_interpreter","arguments":"{}"}'
        assert parse_tool_calls(raw) == [
            ToolUsage(tool="code_interpreter", action="python", duration=1)
        ]

    def test_python_uses_argument_duration(self):
        """Duration from the arguments wins."""
        raw = {"type": "python", "arguments": {"duration": 12.5}, "execution_time": 3}
        [usage] = parse_tool_calls(raw)
        assert usage.tool == "code_interpreter"
        assert usage.duration == 12.5

    def test_python_falls_back_to_execution_time(self):
        """Execution time is used when arguments carry no duration."""
        raw = {"type": "python", "arguments": "{}", "execution_time": 4}
        [usage] = parse_tool_calls(raw)
        assert usage.duration == 4

    def test_list_payload_keeps_order(self):
        """One usage per entry, in payload order."""
        raw = json.dumps(
            [
                {"type": "browser_search", "arguments": json.dumps({"action": "search"})},
                {"type": "code_interpreter", "arguments": json.dumps({"duration": 2})},
                {"type": "browser_search", "arguments": json.dumps({"action": "open"})},
            ]
        )

        usages = parse_tool_calls(raw)

        assert [(u.tool, u.action) for u in usages] == [
            ("browser_search", "browser.search"),
            ("code_interpreter", "python"),
            ("browser_search", "browser.open"),
        ]

    def test_unknown_tool_passes_through(self):
        """Unknown tools keep their type with a count of one."""
        assert parse_tool_calls({"type": "wolfram_alpha", "arguments": "{}"}) == [
            ToolUsage(tool="wolfram_alpha", count=1)
        ]

    def test_malformed_arguments_tolerated(self):
        """Invalid argument JSON is treated as empty arguments."""
        usages = parse_tool_calls({"type": "browser_search", "arguments": "{not json"})
        assert usages == [ToolUsage(tool="browser_search", action="browser.search", count=1)]

    def test_invalid_json_returns_empty(self):
        """Malformed top-level JSON yields no usages."""
        assert parse_tool_calls("[{broken") == []

    def test_empty_inputs(self):
        """Nothing to parse yields no usages."""
        assert parse_tool_calls(None) == []
        assert parse_tool_calls("") == []
        assert parse_tool_calls("null") == []
        assert parse_tool_calls([]) == []

    def test_single_object_without_type(self):
        """A lone entry without a type is ignored."""
        assert parse_tool_calls({"arguments": "{}"}) == []

    def test_json_string_literal_returns_empty(self):
        """A payload that decodes to a bare string is ignored."""
        assert parse_tool_calls('"browser_search"') == []

    def test_non_object_list_entries_skipped(self):
        """List entries that are not objects are dropped."""
        usages = parse_tool_calls([1, "x", {"type": "python", "arguments": "{}"}])
        assert usages == [ToolUsage(tool="code_interpreter", action="python", duration=1)]

    def test_non_finite_duration_uses_default(self):
        """Infinite or negative durations fall back to the default billing second."""
        for duration in ("inf", "-inf", "nan", -5):
            raw = {"type": "python", "arguments": {"duration": duration}}
            assert parse_tool_calls(raw) == [
                ToolUsage(tool="code_interpreter", action="python", duration=1)
            ]

    def test_non_finite_duration_falls_back_to_execution_time(self):
        """A finite execution time is used when the duration is unusable."""
        raw = {"type": "python", "arguments": {"duration": "inf"}, "execution_time": 4.5}
        assert parse_tool_calls(raw) == [
            ToolUsage(tool="code_interpreter", action="python", duration=4.5)
        ]


@pytest.fixture
def parser_logs(monkeypatch):
    """Capture structlog events emitted by the parser module."""
    with capture_logs() as logs:
        monkeypatch.setattr(parser, "logger", structlog.get_logger())
        yield logs


class TestParserLogging:
    """Tests for the events logged while parsing."""

    def test_unknown_tool_is_logged(self, parser_logs):
        """Unknown tool types emit a warning naming the type."""
        usages = parse_tool_calls({"type": "wolfram_alpha", "arguments": "{}"})

        assert usages == [ToolUsage(tool="wolfram_alpha", count=1)]
        events = [entry for entry in parser_logs if entry["event"] == "tool_unknown"]
        assert len(events) == 1
        assert events[0]["tool_type"] == "wolfram_alpha"
        assert events[0]["log_level"] == "warning"

    def test_malformed_payload_is_logged(self, parser_logs):
        """Undecodable JSON text emits an error and yields nothing."""
        assert parse_tool_calls("[{not json") == []

        events = [e for e in parser_logs if e["event"] == "executed_tools_parse_failed"]
        assert len(events) == 1
        assert events[0]["log_level"] == "error"
        assert events[0]["error"]

    def test_known_tools_log_nothing(self, parser_logs):
        """Recognized payloads parse without warnings."""
        parse_tool_calls([{"type": "browser_search", "arguments": "{}"}])
        assert parser_logs == []
