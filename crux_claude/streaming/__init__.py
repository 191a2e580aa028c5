"""Client-side streaming engine for the Messages API.

Pipeline: transport chunks -> :class:`FrameSplitter` -> :func:`decode_frame`
-> :func:`parse_events` (``EventResult`` elements) -> views
(:func:`accumulate_text`, :func:`filter_events`) or the reducer
(:func:`build_final_message`).
"""
from .builder import BuilderState, BuildResult, MessageBuilder, build_final_message
from .decoder import EventEnvelope, decode_frame
from .events import EventResult, accumulate_text, filter_events, parse_events
from .frames import FrameSplitter, split_frames
from .normalize import canonical_key, normalize_payload

__all__ = [
    "BuilderState",
    "BuildResult",
    "MessageBuilder",
    "build_final_message",
    "EventEnvelope",
    "decode_frame",
    "EventResult",
    "accumulate_text",
    "filter_events",
    "parse_events",
    "FrameSplitter",
    "split_frames",
    "canonical_key",
    "normalize_payload",
]
