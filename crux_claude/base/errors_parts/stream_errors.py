"""
Streaming error types.

These cover failures of the event-stream engine itself. Decode-level problems
are represented as data inside the event stream (failure elements) rather than
raised; the exception types exist so those elements carry a precise, typed
reason and so :meth:`BuildResult.unwrap` has something meaningful to raise.
"""
from __future__ import annotations

from typing import Any, List, Optional, Sequence


class StreamError(Exception):
    """Base class for streaming engine failures.

    Attributes:
        payload: Server ``error`` event payload or underlying error, when the
            failure originated outside the engine.
    """

    def __init__(self, message: str, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.payload = payload


class FrameDecodeError(StreamError):
    """A complete frame could not be decoded (no ``event:`` line)."""

    def __init__(self, lines: Sequence[str]) -> None:
        self.lines: List[str] = list(lines)
        super().__init__(f"frame has no event line: {self.lines!r}")


class TruncatedStreamError(StreamError):
    """End of stream reached with an unterminated, unrecognizable trailing frame."""

    def __init__(self, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f"stream ended with truncated data: {fragment!r}")


class StreamTransportError(StreamError):
    """The transport failed while producing the next chunk."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"transport error: {cause}", payload=cause)


__all__ = [
    "StreamError",
    "FrameDecodeError",
    "TruncatedStreamError",
    "StreamTransportError",
]
