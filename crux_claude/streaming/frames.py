"""Frame splitting for the Server-Sent-Events wire format.

The transport may cut the byte stream anywhere: mid-frame, mid-line, even in
the middle of a multi-byte UTF-8 character. :class:`FrameSplitter` buffers the
trailing partial line across chunks and groups complete lines into frames,
one frame per blank-line-terminated block. Lines may end in LF, CRLF or a
bare CR.

Comment lines (starting with ``:``) are discarded on arrival, so a
comment-only keep-alive block never produces a frame.
"""
from __future__ import annotations

import codecs
import re
from typing import Iterable, Iterator, List, Union

from ..base.errors import TruncatedStreamError

Chunk = Union[str, bytes, bytearray]
Frame = List[str]

RECOGNIZED_PREFIXES = ("event:", "data:")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class FrameSplitter:
    """Incremental line buffer that emits complete frames.

    Parameters:
        drop_truncated: When ``True`` (default) an unrecognizable trailing
            fragment at end of stream is silently dropped. When ``False``,
            :meth:`flush` raises :class:`TruncatedStreamError` instead.
    """

    def __init__(self, *, drop_truncated: bool = True) -> None:
        self.drop_truncated = drop_truncated
        self._buffer = ""
        self._pending: Frame = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def has_pending(self) -> bool:
        """Whether any unterminated data is buffered."""
        return bool(self._buffer or self._pending)

    def feed(self, chunk: Chunk) -> List[Frame]:
        """Consume one chunk and return the frames it completed (maybe none)."""
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))
        if not chunk:
            return []
        text = self._buffer + chunk
        # A trailing CR may be the first half of a CRLF split across chunks.
        held = ""
        if text.endswith("\r"):
            text, held = text[:-1], "\r"
        lines = _LINE_BREAK.split(text)
        # The last piece is either "" (text ended on a line break) or a partial line.
        self._buffer = lines.pop() + held
        return self._collect(lines)

    def flush(self) -> List[Frame]:
        """Signal end of stream; returns the final frame if one is recoverable.

        Raises:
            TruncatedStreamError: when ``drop_truncated`` is ``False`` and the
                pending data holds no ``event:``/``data:`` line.
        """
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        if tail.endswith("\r"):
            # A held CR terminates the buffered line (an empty one ends the frame).
            frames = self._collect([tail[:-1]])
        else:
            frames = self._collect([tail]) if tail else []
        remaining, self._pending = self._pending, []
        if not remaining:
            return frames
        if any(line.startswith(RECOGNIZED_PREFIXES) for line in remaining):
            return frames + [remaining]
        if not self.drop_truncated:
            raise TruncatedStreamError("\n".join(remaining))
        return frames

    def _collect(self, lines: Iterable[str]) -> List[Frame]:
        frames: List[Frame] = []
        for line in lines:
            if not line:
                if self._pending:
                    frames.append(self._pending)
                    self._pending = []
                continue
            if line.startswith(":"):
                continue
            self._pending.append(line)
        return frames


def split_frames(chunks: Iterable[Chunk], *, drop_truncated: bool = True) -> Iterator[Frame]:
    """Lazily split an iterable of chunks into frames (flushes at exhaustion)."""
    splitter = FrameSplitter(drop_truncated=drop_truncated)
    for chunk in chunks:
        yield from splitter.feed(chunk)
    yield from splitter.flush()


__all__ = ["FrameSplitter", "split_frames", "Frame", "Chunk", "RECOGNIZED_PREFIXES"]
