"""crux_claude package

Client for the Anthropic Messages API with a pull-based streaming engine.

Purpose:
    Provide a small, explicit API: build a validated request, send it through
    an :class:`AnthropicClient`, and either read the complete response or
    consume a Server-Sent-Events stream through lazy views (text fragments,
    filtered events, final message).

Public API (re-exported):
    - Version: ``__version__``
    - Client: :class:`AnthropicClient`, :class:`ClientConfig`,
      :func:`load_client_config`, :func:`create_client`
    - Exceptions: :class:`ProviderError`, :class:`APIError`,
      :class:`ErrorCode`, :class:`StreamError`
    - Messages: :class:`MessageRequest`, :class:`MessageResponse`,
      :func:`create_message`, :func:`count_tokens`, :func:`stream_message`
    - Streaming: :func:`parse_events`, :func:`accumulate_text`,
      :func:`filter_events`, :func:`build_final_message`

Submodules ``crux_claude.tools`` and ``crux_claude.batches`` hold the tool-use
helpers and the Message Batches API.
"""

from typing import Any, Mapping, Optional

from .base.errors import APIError, ErrorCode, ProviderError, StreamError
from .base.http import AnthropicClient
from .config import ClientConfig, load_client_config
from .messages import (
    MessageRequest,
    MessageResponse,
    MessageStream,
    count_tokens,
    create_message,
    stream_message,
)
from .streaming import accumulate_text, build_final_message, filter_events, parse_events

__version__ = "0.1.0"


def create_client(overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> AnthropicClient:
    """Build an :class:`AnthropicClient` from :func:`load_client_config`.

    ``kwargs`` are forwarded to the client constructor (``transport``,
    ``http_client``).
    """
    return AnthropicClient(load_client_config(overrides), **kwargs)


__all__ = [
    "__version__",
    "AnthropicClient",
    "ClientConfig",
    "load_client_config",
    "create_client",
    "ProviderError",
    "APIError",
    "ErrorCode",
    "StreamError",
    "MessageRequest",
    "MessageResponse",
    "MessageStream",
    "create_message",
    "count_tokens",
    "stream_message",
    "parse_events",
    "accumulate_text",
    "filter_events",
    "build_final_message",
]
