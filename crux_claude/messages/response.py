"""
Typed view over a complete Messages API response.

``MessageResponse.from_dict`` accepts either the JSON body of a non-streaming
``POST /messages`` call or the ``message`` produced by
:func:`crux_claude.streaming.build_final_message`; both share one shape.

Unknown content block kinds are kept as :class:`UnknownBlock` and unknown stop
reasons stay plain strings, so newer server features never fail parsing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class StopReason(str, Enum):
    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    TOOL_USE = "tool_use"
    PAUSE_TURN = "pause_turn"
    REFUSAL = "refusal"
    MODEL_CONTEXT_WINDOW_EXCEEDED = "model_context_window_exceeded"

    @classmethod
    def parse(cls, value: Any) -> Union["StopReason", str, None]:
        """Map a raw stop reason to the enum; unknown strings pass through."""
        if value is None or isinstance(value, StopReason):
            return value
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass
class TextBlock:
    text: str = ""
    type: str = "text"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass
class ThinkingBlock:
    thinking: str = ""
    signature: Optional[str] = None
    type: str = "thinking"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "thinking": self.thinking}
        if self.signature is not None:
            out["signature"] = self.signature
        return out


@dataclass
class ToolUseBlock:
    """A tool invocation requested by the model.

    ``partial_json`` is only set when a streamed tool input could not be
    parsed; ``input`` then holds whatever the block started with.
    """

    id: str
    name: str
    input: Any = field(default_factory=dict)
    partial_json: Optional[str] = None
    type: str = "tool_use"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "id": self.id, "name": self.name, "input": self.input}
        if self.partial_json is not None:
            out["partial_json"] = self.partial_json
        return out


@dataclass
class ToolResultBlock:
    tool_use_id: str
    content: Any = None
    is_error: Optional[bool] = None
    type: str = "tool_result"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "tool_use_id": self.tool_use_id, "content": self.content}
        if self.is_error is not None:
            out["is_error"] = self.is_error
        return out


@dataclass
class UnknownBlock:
    """Block of a kind this client does not model; ``raw`` is the mapping as received."""

    raw: Dict[str, Any]

    @property
    def type(self) -> Optional[str]:
        return self.raw.get("type")

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw)


ContentBlock = Union[TextBlock, ThinkingBlock, ToolUseBlock, ToolResultBlock, UnknownBlock]


def parse_content_block(block: Mapping[str, Any]) -> ContentBlock:
    """Convert one raw content block mapping to its typed form."""
    kind = block.get("type")
    if kind == "text":
        return TextBlock(text=block.get("text") or "")
    if kind == "thinking":
        return ThinkingBlock(thinking=block.get("thinking") or "", signature=block.get("signature"))
    if kind == "tool_use":
        return ToolUseBlock(
            id=block.get("id") or "",
            name=block.get("name") or "",
            input=block.get("input") if block.get("input") is not None else {},
            partial_json=block.get("partial_json"),
        )
    if kind == "tool_result":
        return ToolResultBlock(
            tool_use_id=block.get("tool_use_id") or "",
            content=block.get("content"),
            is_error=block.get("is_error"),
        )
    return UnknownBlock(raw=dict(block))


@dataclass
class Usage:
    """Token accounting; cache counters are ``None`` when the server omits them."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: Optional[int] = None
    cache_read_input_tokens: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Usage":
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            input_tokens=int(data.get("input_tokens") or 0),
            output_tokens=int(data.get("output_tokens") or 0),
            cache_creation_input_tokens=data.get("cache_creation_input_tokens"),
            cache_read_input_tokens=data.get("cache_read_input_tokens"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens}
        if self.cache_creation_input_tokens is not None:
            out["cache_creation_input_tokens"] = self.cache_creation_input_tokens
        if self.cache_read_input_tokens is not None:
            out["cache_read_input_tokens"] = self.cache_read_input_tokens
        return out


@dataclass
class MessageResponse:
    """A complete assistant message.

    Attributes:
        id: Server-assigned message id (``msg_...``).
        type: Always ``"message"`` for current API versions.
        role: Always ``"assistant"``.
        model: Model that produced the message.
        content: Typed content blocks in order.
        stop_reason: :class:`StopReason` member, an unrecognized string, or
            ``None`` when the stream ended before a ``message_delta``.
        stop_sequence: The matched custom stop sequence, if any.
        usage: Token accounting.
    """

    id: Optional[str] = None
    type: Optional[str] = None
    role: Optional[str] = None
    model: Optional[str] = None
    content: List[ContentBlock] = field(default_factory=list)
    stop_reason: Union[StopReason, str, None] = None
    stop_sequence: Optional[str] = None
    usage: Usage = field(default_factory=Usage)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MessageResponse":
        content = data.get("content") or []
        return cls(
            id=data.get("id"),
            type=data.get("type"),
            role=data.get("role"),
            model=data.get("model"),
            content=[parse_content_block(b) for b in content if isinstance(b, Mapping)],
            stop_reason=StopReason.parse(data.get("stop_reason")),
            stop_sequence=data.get("stop_sequence"),
            usage=Usage.from_dict(data.get("usage")),
        )

    def get_text(self) -> str:
        """Concatenate the text of all text blocks."""
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    def get_tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-serializable wire shape of the message."""
        stop = self.stop_reason.value if isinstance(self.stop_reason, StopReason) else self.stop_reason
        return {
            "id": self.id,
            "type": self.type,
            "role": self.role,
            "model": self.model,
            "content": [b.to_dict() for b in self.content],
            "stop_reason": stop,
            "stop_sequence": self.stop_sequence,
            "usage": self.usage.to_dict(),
        }


__all__ = [
    "StopReason",
    "TextBlock",
    "ThinkingBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "UnknownBlock",
    "ContentBlock",
    "parse_content_block",
    "Usage",
    "MessageResponse",
]
