"""Messages API: request model, typed response view and endpoints."""
from .api import MessageStream, count_tokens, create_message, stream_message
from .request import MessageParam, MessageRequest, ToolChoice, cache_control
from .response import (
    ContentBlock,
    MessageResponse,
    StopReason,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UnknownBlock,
    Usage,
)

__all__ = [
    "MessageStream",
    "count_tokens",
    "create_message",
    "stream_message",
    "MessageParam",
    "MessageRequest",
    "ToolChoice",
    "cache_control",
    "ContentBlock",
    "MessageResponse",
    "StopReason",
    "TextBlock",
    "ThinkingBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "UnknownBlock",
    "Usage",
]
