"""
Messages API endpoints.

``create_message`` and ``count_tokens`` are plain JSON round trips through
:meth:`AnthropicClient.send`. ``stream_message`` opens a Server-Sent-Events
response and wraps it in a :class:`MessageStream`, which exposes the streaming
engine's views over the live body.

Requests may be passed as a :class:`MessageRequest` or as an already-built
payload mapping.
"""
from __future__ import annotations

import contextlib
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

from ..base.errors import ErrorCode, ProviderError
from ..base.http import AnthropicClient, raise_for_result
from ..base.logging import LogContext, get_logger, log_event
from ..streaming import (
    BuildResult,
    EventResult,
    accumulate_text,
    build_final_message,
    filter_events,
    parse_events,
)
from .request import MessageRequest
from .response import MessageResponse

RequestLike = Union[MessageRequest, Mapping[str, Any]]

_logger = get_logger("crux_claude.messages")


def _payload(request: RequestLike) -> Dict[str, Any]:
    if isinstance(request, MessageRequest):
        return request.to_payload()
    return dict(request)


def _json_body(body: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(body, Mapping):
        raise ProviderError(code=ErrorCode.INTERNAL, message=f"unexpected {what} response body", raw=body)
    return body


def create_message(client: AnthropicClient, request: RequestLike) -> MessageResponse:
    """Send a non-streaming request and return the typed response.

    Raises:
        APIError: non-2xx response.
        ProviderError: transport failure after retries.
    """
    payload = _payload(request)
    payload.pop("stream", None)
    result = raise_for_result(client.send("POST", "messages", payload))
    response = MessageResponse.from_dict(_json_body(result.body, "messages"))
    log_event(
        _logger,
        "messages.create",
        LogContext(model=response.model, message_id=response.id, request_id=result.request_id),
        stop_reason=response.stop_reason,
        input_tokens=response.usage.input_tokens,
        output_tokens=response.usage.output_tokens,
    )
    return response


def count_tokens(client: AnthropicClient, request: RequestLike) -> int:
    """Return the input token count the request would consume."""
    payload = _payload(request)
    payload.pop("stream", None)
    result = raise_for_result(client.send("POST", "messages/count_tokens", payload))
    body = _json_body(result.body, "count_tokens")
    return int(body.get("input_tokens") or 0)


class MessageStream:
    """A live streamed response.

    Iterating yields :class:`~crux_claude.streaming.EventResult` elements. The
    underlying event sequence is single-pass: the helper views
    (:meth:`text_stream`, :meth:`events`, :meth:`final_message`) all draw from
    the same cursor, so each element is seen by exactly one consumer.

    Closing a view closes the shared cursor too, so a view abandoned early
    ends the stream for every other consumer. Use as a context manager (or
    call :meth:`close`) to release the HTTP response.
    """

    def __init__(
        self,
        client: AnthropicClient,
        payload: Mapping[str, Any],
        *,
        drop_truncated: bool = True,
        sort_by_index: bool = False,
    ) -> None:
        self.sort_by_index = sort_by_index
        self._stack = contextlib.ExitStack()
        self.response = self._stack.enter_context(client.stream("POST", "messages", body=dict(payload)))
        self._events = parse_events(self.response.iter_bytes(), drop_truncated=drop_truncated)
        self._stack.callback(self._events.close)
        self.closed = False

    @property
    def request_id(self) -> Optional[str]:
        return self.response.headers.get("request-id")

    def __iter__(self) -> Iterator[EventResult]:
        return self._events

    def text_stream(self) -> Iterator[str]:
        """Lazy view of ``text_delta`` fragments."""
        return accumulate_text(self._events)

    def events(self, names: Union[str, Iterable[str]]) -> Iterator[EventResult]:
        """Lazy view of the elements whose event name is in ``names``."""
        return filter_events(self._events, names)

    def final_message(self) -> BuildResult:
        """Fold the remaining events into the final message.

        Elements already pulled through another view are not replayed.
        """
        return build_final_message(self._events, sort_by_index=self.sort_by_index)

    def final_response(self) -> MessageResponse:
        """Typed form of :meth:`final_message`.

        Raises:
            StreamError: the stream carried an error event or failed.
        """
        return MessageResponse.from_dict(self.final_message().unwrap())

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._stack.close()

    def __enter__(self) -> "MessageStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def stream_message(
    client: AnthropicClient,
    request: RequestLike,
    *,
    drop_truncated: bool = True,
    sort_by_index: bool = False,
) -> MessageStream:
    """Open a streaming request (``stream`` is forced to ``true``).

    Raises:
        APIError: non-2xx response; the body is read before raising.
        ProviderError: the connection could not be established.
    """
    payload = _payload(request)
    payload["stream"] = True
    stream = MessageStream(client, payload, drop_truncated=drop_truncated, sort_by_index=sort_by_index)
    log_event(
        _logger,
        "messages.stream.open",
        LogContext(model=payload.get("model"), request_id=stream.request_id),
    )
    return stream


__all__ = ["RequestLike", "create_message", "count_tokens", "MessageStream", "stream_message"]
