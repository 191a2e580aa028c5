"""Frame decoding: one frame's lines -> one :class:`EventEnvelope`."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..base.errors import FrameDecodeError
from ..base.logging import get_logger, log_event
from .normalize import normalize_payload

_logger = get_logger("crux_claude.streaming.decoder")

# Payloads of these events are key-normalized; any other event keeps its payload as parsed.
KNOWN_EVENTS = frozenset(
    (
        "message_start",
        "content_block_start",
        "content_block_delta",
        "content_block_stop",
        "message_delta",
        "message_stop",
        "ping",
        "error",
    )
)


@dataclass(frozen=True)
class EventEnvelope:
    """A decoded stream event.

    Attributes:
        event: Event name from the ``event:`` line (``message_start``,
            ``content_block_delta``, ... or any future name).
        data: Parsed and key-normalized ``data:`` payload; ``None`` when the
            frame had no data line or the data was not valid JSON.
    """

    event: str
    data: Optional[Any] = None


def decode_frame(lines: Sequence[str]) -> EventEnvelope:
    """Decode one frame.

    ``event:`` and ``data:`` lines are recognized (prefix removed, value
    trimmed); when repeated, the last occurrence wins. Any other field is
    ignored. Only payloads of :data:`KNOWN_EVENTS` go through key
    normalization; unknown events are forwarded exactly as parsed.

    Raises:
        FrameDecodeError: the frame carries no ``event:`` line.
    """
    name: Optional[str] = None
    raw: Optional[str] = None
    for line in lines:
        if line.startswith("event:"):
            name = line[len("event:"):].strip()
        elif line.startswith("data:"):
            raw = line[len("data:"):].strip()
    if name is None:
        raise FrameDecodeError(lines)
    if raw is None:
        return EventEnvelope(event=name)
    try:
        payload = json.loads(raw)
    except ValueError:
        log_event(
            _logger,
            "stream.payload.invalid_json",
            level=logging.DEBUG,
            stream_event=name,
            data_length=len(raw),
        )
        return EventEnvelope(event=name)
    if name in KNOWN_EVENTS:
        payload = normalize_payload(payload)
    return EventEnvelope(event=name, data=payload)


__all__ = ["EventEnvelope", "KNOWN_EVENTS", "decode_frame"]
