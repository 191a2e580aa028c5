"""
Pydantic request model for the Messages API.

Purpose
-------
``MessageRequest`` validates a Messages API request body before it leaves the
process: roles, sampling bounds, tool choice shape and service tier are checked
locally so mistakes surface as ``pydantic.ValidationError`` instead of a 400
from the server.

Every ``add_*``/``set_*``/``enable_*`` method returns a *new* validated copy, so
requests can be built fluently and shared without aliasing surprises::

    request = (
        MessageRequest(model="claude-sonnet-4-5-20250929")
        .add_message("user", "Hello!")
        .set_system("You are a helpful assistant")
        .set_max_tokens(1024)
    )
    payload = request.to_payload()

External dependencies: Pydantic v2 only. No I/O.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Role = Literal["user", "assistant"]
Content = Union[str, List[Dict[str, Any]]]


class MessageParam(BaseModel):
    """One conversation turn.

    ``content`` is either a non-empty string or a non-empty list of content
    block mappings (text, image, document, tool_use, tool_result ...).
    """

    role: Role
    content: Content

    @model_validator(mode="after")
    def _validate_content(self) -> "MessageParam":
        if isinstance(self.content, str):
            if not self.content:
                raise ValueError("content string must be non-empty")
        elif not self.content:
            raise ValueError("content blocks must be a non-empty list")
        return self


class ToolChoice(BaseModel):
    """Tool selection strategy; ``name`` is required only for ``type="tool"``."""

    type: Literal["auto", "any", "tool", "none"]
    name: Optional[str] = None

    @model_validator(mode="after")
    def _validate_name(self) -> "ToolChoice":
        if self.type == "tool" and not self.name:
            raise ValueError("tool choice of type 'tool' requires a name")
        return self


def cache_control(ttl: Optional[str] = None) -> Dict[str, Any]:
    """Ephemeral prompt-cache marker; ``ttl`` is ``"5m"`` (server default) or ``"1h"``."""
    control: Dict[str, Any] = {"type": "ephemeral"}
    if ttl is not None:
        control["ttl"] = ttl
    return control


class MessageRequest(BaseModel):
    """Validated Messages API request.

    Parameters:
        model: Target model identifier (non-empty).
        messages: Conversation turns, in order.
        max_tokens: Generation cap; must be positive when set.
        system: System prompt string or list of system content blocks.
        temperature: Sampling temperature within [0.0, 1.0].
        top_p: Nucleus sampling mass within [0.0, 1.0].
        top_k: Positive top-k cutoff.
        stop_sequences: Custom stop strings.
        stream: ``True`` for a server-sent event response.
        tools: Tool definitions (see :func:`crux_claude.tools.define_tool`).
        tool_choice: Tool selection strategy.
        metadata: Request metadata (e.g. ``{"user_id": ...}``).
        thinking: Extended thinking configuration.
        mcp_servers: MCP server definitions.
        context_management: Context management configuration.
        container: Container id or configuration mapping.
        service_tier: ``"auto"`` or ``"standard_only"``.

    Raises:
        ValidationError: On any field outside its allowed range or shape.
    """

    model_config = ConfigDict(extra="forbid")

    model: str = Field(..., min_length=1)
    messages: List[MessageParam] = Field(default_factory=list)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    system: Optional[Union[str, List[Dict[str, Any]]]] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, gt=0)
    stop_sequences: Optional[List[str]] = None
    stream: Optional[bool] = None
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[ToolChoice] = None
    metadata: Optional[Dict[str, Any]] = None
    thinking: Optional[Dict[str, Any]] = None
    mcp_servers: Optional[List[Dict[str, Any]]] = None
    context_management: Optional[Dict[str, Any]] = None
    container: Optional[Union[str, Dict[str, Any]]] = None
    service_tier: Optional[Literal["auto", "standard_only"]] = None

    def _with(self, **changes: Any) -> "MessageRequest":
        return type(self).model_validate({**self.model_dump(), **changes})

    # ---- messages ----
    def add_message(self, role: str, content: Content) -> "MessageRequest":
        """Append a turn; ``content`` is a string or a list of content blocks."""
        turns = [m.model_dump() for m in self.messages]
        turns.append({"role": role, "content": content})
        return self._with(messages=turns)

    def add_message_with_image(
        self, role: str, text: str, data: str, media_type: str = "image/jpeg"
    ) -> "MessageRequest":
        """Append a turn holding a base64 image followed by ``text``."""
        image = {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": data}}
        return self.add_message(role, [image, {"type": "text", "text": text}])

    def add_message_with_image_url(self, role: str, text: str, url: str) -> "MessageRequest":
        image = {"type": "image", "source": {"type": "url", "url": url}}
        return self.add_message(role, [image, {"type": "text", "text": text}])

    def add_message_with_document(self, role: str, text: str, file_id: str) -> "MessageRequest":
        """Append a turn referencing an uploaded file followed by ``text``."""
        document = {"type": "document", "source": {"type": "file", "file_id": file_id}}
        return self.add_message(role, [document, {"type": "text", "text": text}])

    # ---- prompt and sampling ----
    def set_system(self, system: Union[str, List[Dict[str, Any]]]) -> "MessageRequest":
        return self._with(system=system)

    def set_system_with_cache(self, text: str, ttl: Optional[str] = None) -> "MessageRequest":
        """Set a single cached text block as the system prompt."""
        return self._with(system=[{"type": "text", "text": text, "cache_control": cache_control(ttl)}])

    def set_max_tokens(self, max_tokens: int) -> "MessageRequest":
        return self._with(max_tokens=max_tokens)

    def set_temperature(self, temperature: float) -> "MessageRequest":
        return self._with(temperature=temperature)

    def set_top_p(self, top_p: float) -> "MessageRequest":
        return self._with(top_p=top_p)

    def set_top_k(self, top_k: int) -> "MessageRequest":
        return self._with(top_k=top_k)

    def set_stop_sequences(self, sequences: List[str]) -> "MessageRequest":
        return self._with(stop_sequences=list(sequences))

    def enable_streaming(self) -> "MessageRequest":
        return self._with(stream=True)

    # ---- tools ----
    def add_tool(self, tool: Mapping[str, Any]) -> "MessageRequest":
        return self._with(tools=[*(self.tools or []), dict(tool)])

    def add_tool_with_cache(self, tool: Mapping[str, Any], ttl: Optional[str] = None) -> "MessageRequest":
        """Append a tool definition marked as a prompt-cache breakpoint."""
        return self.add_tool({**tool, "cache_control": cache_control(ttl)})

    def set_tool_choice(self, choice: Union[str, Mapping[str, Any]]) -> "MessageRequest":
        """Set the tool choice.

        Accepts ``"auto"``, ``"any"``, ``"none"`` or ``{"tool": name}`` (the
        wire form ``{"type": "tool", "name": name}`` is accepted as well).
        """
        if isinstance(choice, str):
            tool_choice: Dict[str, Any] = {"type": choice}
        elif "tool" in choice:
            tool_choice = {"type": "tool", "name": choice["tool"]}
        else:
            tool_choice = dict(choice)
        return self._with(tool_choice=tool_choice)

    # ---- misc request options ----
    def set_metadata(self, metadata: Mapping[str, Any]) -> "MessageRequest":
        return self._with(metadata=dict(metadata))

    def enable_thinking(self, config: Mapping[str, Any]) -> "MessageRequest":
        """Enable extended thinking, e.g. ``{"type": "enabled", "budget_tokens": 1024}``."""
        return self._with(thinking=dict(config))

    def add_mcp_server(self, server: Mapping[str, Any]) -> "MessageRequest":
        return self._with(mcp_servers=[*(self.mcp_servers or []), dict(server)])

    def set_context_management(self, config: Mapping[str, Any]) -> "MessageRequest":
        return self._with(context_management=dict(config))

    def set_container(self, container: Union[str, Mapping[str, Any]]) -> "MessageRequest":
        return self._with(container=container if isinstance(container, str) else dict(container))

    def set_service_tier(self, tier: str) -> "MessageRequest":
        return self._with(service_tier=tier)

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON request body; unset fields are omitted."""
        return self.model_dump(exclude_none=True)


__all__ = ["Role", "Content", "MessageParam", "ToolChoice", "MessageRequest", "cache_control"]
