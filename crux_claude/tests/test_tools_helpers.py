"""Tool-use helper functions."""
from __future__ import annotations

import json

import pytest

from crux_claude.messages import MessageResponse
from crux_claude.tools import (
    ToolUse,
    create_tool_result,
    create_tool_result_message,
    define_tool,
    extract_tool_uses,
    has_tool_uses,
)

SCHEMA = {"type": "object", "properties": {"location": {"type": "string"}}, "required": ["location"]}

RESPONSE = {
    "id": "msg_1",
    "content": [
        {"type": "text", "text": "Let me check."},
        {"type": "tool_use", "id": "toolu_1", "name": "get_weather", "input": {"location": "SF"}},
        {"type": "tool_use", "id": "toolu_2", "name": "get_time", "input": {}},
    ],
}


def test_define_tool():
    assert define_tool("get_weather", "Weather lookup", SCHEMA) == {  # nosec B101
        "name": "get_weather",
        "description": "Weather lookup",
        "input_schema": SCHEMA,
    }
    with pytest.raises(ValueError):
        define_tool("", "d", SCHEMA)


def test_extract_tool_uses_from_mapping_and_typed_response():
    expected = [
        ToolUse(id="toolu_1", name="get_weather", input={"location": "SF"}),
        ToolUse(id="toolu_2", name="get_time", input={}),
    ]
    assert extract_tool_uses(RESPONSE) == expected  # nosec B101
    assert extract_tool_uses(MessageResponse.from_dict(RESPONSE)) == expected  # nosec B101


def test_has_tool_uses():
    assert has_tool_uses(RESPONSE)  # nosec B101
    assert not has_tool_uses({"content": [{"type": "text", "text": "done"}]})  # nosec B101
    assert not has_tool_uses({"id": "no content"})  # nosec B101


def test_create_tool_result_variants():
    assert create_tool_result("toolu_1", "72F and sunny") == {  # nosec B101
        "type": "tool_result",
        "tool_use_id": "toolu_1",
        "content": "72F and sunny",
    }
    blocks = [{"type": "text", "text": "data"}]
    assert create_tool_result("toolu_1", blocks)["content"] == blocks  # nosec B101
    encoded = create_tool_result("toolu_1", {"temp": 72})["content"]
    assert json.loads(encoded) == {"temp": 72}  # nosec B101
    assert create_tool_result("toolu_1", 42)["content"] == "42"  # nosec B101


def test_error_results_are_flagged():
    result = create_tool_result("toolu_1", "lookup failed", is_error=True)
    assert result["is_error"] is True  # nosec B101
    assert "is_error" not in create_tool_result("toolu_1", "ok")  # nosec B101


def test_tool_result_message_is_user_content():
    results = [create_tool_result("a", "1"), create_tool_result("b", "2")]
    message = create_tool_result_message(results)
    assert message == results  # nosec B101
    assert message is not results  # nosec B101
