"""Final-message reducer for streamed Messages API responses.

:class:`MessageBuilder` folds the event stream into one complete message
dict: the header fields from ``message_start`` (patched by ``message_delta``),
the ordered list of closed content blocks under ``content``, and merged usage
counters. It is a small state machine:

``STREAMING`` -> ``COMPLETED`` (``message_stop`` or exhaustion without error)
``STREAMING`` -> ``FAILED`` (``error`` event or a failure element)

Terminal states are final: later elements are ignored, so a captured error is
never overwritten.

Malformed orderings are tolerated: a delta or stop with no open block (or
with an index that does not match the open block) is a no-op, unknown event
names and unknown delta kinds leave the state untouched.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..base.errors import StreamError
from ..base.logging import LogContext, get_logger, log_event
from .events import EventResult


class BuilderState(str, Enum):
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class _OpenBlock:
    index: Optional[int]
    block: Dict[str, Any]
    partial_json: List[str] = field(default_factory=list)

    def matches(self, data: Mapping[str, Any]) -> bool:
        index = data.get("index")
        return index is None or self.index is None or index == self.index


@dataclass(frozen=True)
class BuildResult:
    """Outcome of :func:`build_final_message`.

    Attributes:
        ok: ``True`` when the stream completed without an error signal.
        message: Header fields plus ``content`` (only when ``ok``).
        error: The server ``error`` payload or the failure element's
            exception (only when not ``ok``).
    """

    ok: bool
    message: Optional[Dict[str, Any]] = None
    error: Any = None

    def unwrap(self) -> Dict[str, Any]:
        """Return the message or raise.

        Raises:
            StreamError: the stream failed; ``payload`` holds the error. A
                :class:`StreamError` captured from the stream is re-raised as is.
        """
        if self.ok:
            return self.message  # type: ignore[return-value]
        if isinstance(self.error, StreamError):
            raise self.error
        if isinstance(self.error, BaseException):
            raise StreamError(str(self.error), payload=self.error) from self.error
        raise StreamError(_error_message(self.error), payload=self.error)


def _error_message(payload: Any) -> str:
    if isinstance(payload, Mapping):
        inner = payload.get("error")
        if isinstance(inner, Mapping):
            kind = inner.get("type") or "error"
            return f"{kind}: {inner.get('message') or 'stream error'}"
        if payload.get("message"):
            return str(payload["message"])
    return "stream error"


def _as_mapping(data: Any) -> Mapping[str, Any]:
    return data if isinstance(data, Mapping) else {}


class MessageBuilder:
    """Stateful fold over one event stream.

    Parameters:
        sort_by_index: Order closed blocks by their ``index`` when finishing
            instead of trusting ``content_block_stop`` arrival order.
    """

    def __init__(self, *, sort_by_index: bool = False) -> None:
        self.sort_by_index = sort_by_index
        self.state = BuilderState.STREAMING
        self._header: Dict[str, Any] = {}
        self._closed: List[Tuple[Optional[int], Dict[str, Any]]] = []
        self._current: Optional[_OpenBlock] = None
        self._error: Any = None
        self._events_seen = 0
        self._logger = get_logger("crux_claude.streaming.builder")
        self._handlers: Dict[str, Callable[[Mapping[str, Any]], None]] = {
            "message_start": self._on_message_start,
            "content_block_start": self._on_block_start,
            "content_block_delta": self._on_block_delta,
            "content_block_stop": self._on_block_stop,
            "message_delta": self._on_message_delta,
            "message_stop": self._on_message_stop,
        }

    @property
    def done(self) -> bool:
        return self.state is not BuilderState.STREAMING

    def apply(self, result: EventResult) -> BuilderState:
        """Fold one element and return the resulting state."""
        if self.done:
            return self.state
        self._events_seen += 1
        if not result.ok:
            self._fail(result.error)
        elif result.event == "error":
            self._fail(result.data)
        else:
            handler = self._handlers.get(result.event or "")
            if handler is not None:
                handler(_as_mapping(result.data))
        return self.state

    def feed(self, events: Iterable[EventResult]) -> "MessageBuilder":
        """Apply elements until a terminal state; stops pulling afterwards."""
        for result in events:
            if self.apply(result) is not BuilderState.STREAMING:
                break
        return self

    def finish(self) -> BuildResult:
        """Produce the final result from the current state.

        Exhaustion without ``message_stop`` counts as completion. A block still
        open at this point was never closed and is not included.
        """
        if self.state is BuilderState.FAILED:
            return BuildResult(ok=False, error=self._error)
        self.state = BuilderState.COMPLETED
        closed = self._closed
        if self.sort_by_index:
            closed = sorted(closed, key=lambda item: (item[0] is None, item[0] or 0))
        message = dict(self._header)
        message["content"] = [dict(block) for _, block in closed]
        log_event(
            self._logger,
            "stream.builder.complete",
            LogContext(message_id=message.get("id"), model=message.get("model")),
            blocks=len(message["content"]),
            events=self._events_seen,
            stop_reason=message.get("stop_reason"),
            unclosed_block=self._current is not None or None,
        )
        return BuildResult(ok=True, message=message)

    # ---- transitions ----
    def _fail(self, error: Any) -> None:
        self._error = error
        self.state = BuilderState.FAILED
        log_event(
            self._logger,
            "stream.builder.error",
            LogContext(message_id=self._header.get("id"), model=self._header.get("model")),
            level=logging.WARNING,
            error=error if isinstance(error, Mapping) else str(error),
            events=self._events_seen,
        )

    def _on_message_start(self, data: Mapping[str, Any]) -> None:
        message = _as_mapping(data.get("message"))
        self._header = {k: v for k, v in message.items() if k != "content"}
        if isinstance(self._header.get("usage"), Mapping):
            self._header["usage"] = dict(self._header["usage"])

    def _on_block_start(self, data: Mapping[str, Any]) -> None:
        index = data.get("index")
        block = dict(_as_mapping(data.get("content_block")))
        self._current = _OpenBlock(index=index if isinstance(index, int) else None, block=block)

    def _on_block_delta(self, data: Mapping[str, Any]) -> None:
        current = self._current
        if current is None or not current.matches(data):
            return
        delta = _as_mapping(data.get("delta"))
        kind = delta.get("type")
        block = current.block
        if kind == "text_delta" and isinstance(delta.get("text"), str):
            block["text"] = (block.get("text") or "") + delta["text"]
        elif kind == "thinking_delta" and isinstance(delta.get("thinking"), str):
            block["thinking"] = (block.get("thinking") or "") + delta["thinking"]
        elif kind == "signature_delta" and isinstance(delta.get("signature"), str):
            block["signature"] = delta["signature"]
        elif kind == "input_json_delta" and isinstance(delta.get("partial_json"), str):
            current.partial_json.append(delta["partial_json"])

    def _on_block_stop(self, data: Mapping[str, Any]) -> None:
        current = self._current
        if current is None or not current.matches(data):
            return
        raw = "".join(current.partial_json)
        if raw.strip():
            try:
                current.block["input"] = json.loads(raw)
            except ValueError:
                current.block["partial_json"] = raw
        self._closed.append((current.index, current.block))
        self._current = None

    def _on_message_delta(self, data: Mapping[str, Any]) -> None:
        delta = _as_mapping(data.get("delta"))
        for key in ("stop_reason", "stop_sequence"):
            if delta.get(key) is not None:
                self._header[key] = delta[key]
        usage = data.get("usage")
        if isinstance(usage, Mapping):
            merged = dict(_as_mapping(self._header.get("usage")))
            merged.update({k: v for k, v in usage.items() if v is not None})
            self._header["usage"] = merged

    def _on_message_stop(self, data: Mapping[str, Any]) -> None:
        self.state = BuilderState.COMPLETED


def build_final_message(events: Iterable[EventResult], *, sort_by_index: bool = False) -> BuildResult:
    """Fold an event stream into a :class:`BuildResult`.

    The iterable is consumed once, up to the first terminal signal.
    """
    return MessageBuilder(sort_by_index=sort_by_index).feed(events).finish()


__all__ = ["BuilderState", "BuildResult", "MessageBuilder", "build_final_message"]
