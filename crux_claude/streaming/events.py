"""Event stream composition and its lazy views.

``parse_events`` composes :class:`~.frames.FrameSplitter` and
:func:`~.decoder.decode_frame` over a transport's chunk iterable. It never
raises for decode problems: each element is an :class:`EventResult` that is
either a decoded envelope or a failure carrying the reason, so consumers can
skip or abort as they see fit.

All functions here are generators. Nothing is read from the transport until
the consumer pulls, and closing a view closes the generators beneath it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

import httpx

from ..base.errors import (
    FrameDecodeError,
    StreamTransportError,
    TruncatedStreamError,
)
from ..base.logging import get_logger, log_event
from .decoder import EventEnvelope, decode_frame
from .frames import Chunk, Frame, FrameSplitter

# Raised by a chunk source when the connection fails mid-body.
TRANSPORT_ERRORS = (httpx.TransportError, httpx.StreamError, OSError)

_logger = get_logger("crux_claude.streaming.events")


@dataclass(frozen=True)
class EventResult:
    """One element of the event stream: an envelope or a failure."""

    envelope: Optional[EventEnvelope] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, envelope: EventEnvelope) -> "EventResult":
        return cls(envelope=envelope)

    @classmethod
    def failure(cls, error: BaseException) -> "EventResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def event(self) -> Optional[str]:
        """Event name, or ``None`` for failure elements."""
        return self.envelope.event if self.envelope is not None else None

    @property
    def data(self) -> Optional[Any]:
        return self.envelope.data if self.envelope is not None else None

    def unwrap(self) -> EventEnvelope:
        """Return the envelope or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.envelope  # type: ignore[return-value]


def _decode(frame: Frame) -> EventResult:
    try:
        return EventResult.success(decode_frame(frame))
    except FrameDecodeError as exc:
        log_event(_logger, "stream.frame.decode_error", level=logging.DEBUG, lines=len(frame))
        return EventResult.failure(exc)


def parse_events(chunks: Iterable[Chunk], *, drop_truncated: bool = True) -> Iterator[EventResult]:
    """Turn a chunk iterable (``str`` or ``bytes``) into decoded events.

    Single pass and not restartable. A transport failure while pulling the
    next chunk ends the sequence with one failure element wrapping a
    :class:`StreamTransportError`. With ``drop_truncated=False`` an
    unrecognizable trailing fragment ends it with a
    :class:`TruncatedStreamError` element.
    """
    splitter = FrameSplitter(drop_truncated=drop_truncated)
    source = iter(chunks)
    try:
        while True:
            try:
                chunk = next(source)
            except StopIteration:
                break
            except TRANSPORT_ERRORS as exc:
                log_event(_logger, "stream.transport.error", level=logging.WARNING, error=str(exc))
                yield EventResult.failure(StreamTransportError(exc))
                return
            for frame in splitter.feed(chunk):
                yield _decode(frame)
        try:
            tail = splitter.flush()
        except TruncatedStreamError as exc:
            yield EventResult.failure(exc)
            return
        for frame in tail:
            yield _decode(frame)
    finally:
        _close(source)


def _close(iterator: Any) -> None:
    close = getattr(iterator, "close", None)
    if close is not None:
        close()


def _text_of(data: Any) -> Optional[str]:
    if not isinstance(data, Mapping):
        return None
    delta = data.get("delta")
    if not isinstance(delta, Mapping) or delta.get("type") != "text_delta":
        return None
    text = delta.get("text")
    return text if isinstance(text, str) else None


def accumulate_text(events: Iterable[EventResult]) -> Iterator[str]:
    """Yield the text fragment of every ``text_delta``, in arrival order.

    Thinking and tool-input deltas, other events and failure elements are
    skipped.
    """
    try:
        for result in events:
            if result.event != "content_block_delta":
                continue
            text = _text_of(result.data)
            if text is not None:
                yield text
    finally:
        _close(events)


def filter_events(
    events: Iterable[EventResult],
    allowed_names: Union[str, Iterable[str]],
) -> Iterator[EventResult]:
    """Keep only elements whose event name is in ``allowed_names``.

    Failure elements have no event name and are therefore always dropped.
    """
    allowed = frozenset((allowed_names,) if isinstance(allowed_names, str) else allowed_names)
    try:
        for result in events:
            if result.event in allowed:
                yield result
    finally:
        _close(events)


__all__ = [
    "EventResult",
    "TRANSPORT_ERRORS",
    "parse_events",
    "accumulate_text",
    "filter_events",
]
