"""Tool-use helpers for the Messages API.

Typical round trip::

    weather = define_tool("get_weather", "Current weather for a city", schema)
    request = MessageRequest(model=model).add_message("user", question).add_tool(weather)
    response = create_message(client, request.set_max_tokens(1024))

    results = [create_tool_result(use.id, run_tool(use.name, use.input)) for use in extract_tool_uses(response)]
    follow_up = (
        request.add_message("assistant", response.to_dict()["content"])
        .add_message("user", create_tool_result_message(results))
    )
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from .messages.response import MessageResponse, ToolUseBlock


@dataclass(frozen=True)
class ToolUse:
    """A tool invocation the caller is expected to execute."""

    id: str
    name: str
    input: Any = field(default_factory=dict)


def define_tool(name: str, description: str, input_schema: Mapping[str, Any]) -> Dict[str, Any]:
    """Build a tool definition; ``input_schema`` is a JSON Schema object."""
    if not name:
        raise ValueError("tool name must be non-empty")
    return {"name": name, "description": description, "input_schema": dict(input_schema)}


def _blocks(response: Union[MessageResponse, Mapping[str, Any]]) -> List[Any]:
    if isinstance(response, MessageResponse):
        return list(response.content)
    if isinstance(response, Mapping):
        content = response.get("content")
        return list(content) if isinstance(content, list) else []
    return []


def extract_tool_uses(response: Union[MessageResponse, Mapping[str, Any]]) -> List[ToolUse]:
    """Return the ``tool_use`` blocks of a response, in order.

    Accepts a :class:`MessageResponse` or a raw message mapping (e.g. the
    ``message`` of a :class:`~crux_claude.streaming.BuildResult`). Anything
    without a content list yields ``[]``.
    """
    uses: List[ToolUse] = []
    for block in _blocks(response):
        if isinstance(block, ToolUseBlock):
            uses.append(ToolUse(id=block.id, name=block.name, input=block.input))
        elif isinstance(block, Mapping) and block.get("type") == "tool_use":
            uses.append(ToolUse(id=block.get("id", ""), name=block.get("name", ""), input=block.get("input", {})))
    return uses


def has_tool_uses(response: Union[MessageResponse, Mapping[str, Any]]) -> bool:
    return bool(extract_tool_uses(response))


def create_tool_result(tool_use_id: str, result: Any, is_error: bool = False) -> Dict[str, Any]:
    """Wrap a tool's output as a ``tool_result`` content block.

    Strings and lists of content blocks are sent as is; mappings are
    JSON-encoded; any other value is converted with ``str``.
    """
    if isinstance(result, (str, list)):
        content: Any = result
    elif isinstance(result, Mapping):
        content = json.dumps(result)
    else:
        content = str(result)
    block: Dict[str, Any] = {"type": "tool_result", "tool_use_id": tool_use_id, "content": content}
    if is_error:
        block["is_error"] = True
    return block


def create_tool_result_message(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Content for the ``user`` turn that answers one or more tool uses."""
    return list(results)


__all__ = [
    "ToolUse",
    "define_tool",
    "extract_tool_uses",
    "has_tool_uses",
    "create_tool_result",
    "create_tool_result_message",
]
