"""Frame decoding into event envelopes."""
from __future__ import annotations

import pytest

from crux_claude.base.errors import FrameDecodeError
from crux_claude.base.logging import configure_logger
from crux_claude.streaming.decoder import EventEnvelope, decode_frame


def test_decodes_event_and_json_payload():
    env = decode_frame(["event:  message_start ", 'data: {"message": {"id": "msg_1"}}'])
    assert env == EventEnvelope(event="message_start", data={"message": {"id": "msg_1"}})  # nosec B101


def test_frame_without_data_line_has_null_payload():
    assert decode_frame(["event: message_stop"]).data is None  # nosec B101


def test_invalid_json_degrades_to_null_payload():
    env = decode_frame(["event: content_block_delta", "data: {not json"])
    assert env.event == "content_block_delta"  # nosec B101
    assert env.data is None  # nosec B101


def test_unknown_fields_are_ignored_and_last_value_wins():
    env = decode_frame(["id: 42", "event: a", "retry: 100", "event: b", "data: 1", "data: 2"])
    assert env == EventEnvelope(event="b", data=2)  # nosec B101


def test_frame_without_event_line_is_a_decode_error():
    with pytest.raises(FrameDecodeError) as ei:
        decode_frame(['data: {"a": 1}'])
    assert ei.value.lines == ['data: {"a": 1}']  # nosec B101


def test_payload_keys_are_normalized():
    env = decode_frame(["event: message_delta", 'data: {"delta": {"stopReason": "end_turn"}, "usage": {"outputTokens": 3}}'])
    assert env.data == {"delta": {"stop_reason": "end_turn"}, "usage": {"output_tokens": 3}}  # nosec B101


def test_invalid_json_is_logged_at_debug(log_lines):
    configure_logger(level="DEBUG")
    try:
        decode_frame(["event: ping", "data: {oops"])
    finally:
        configure_logger(level="INFO")
    events = [line for line in log_lines() if line.get("event") == "stream.payload.invalid_json"]
    assert events and events[0]["stream_event"] == "ping"  # nosec B101
    assert events[0]["data_length"] == len("{oops")  # nosec B101


def test_unknown_event_payload_keeps_its_keys():
    env = decode_frame(["event: future_event_type", 'data: {"stopReason": 1, "contentBlock": {"partialJson": "x"}}'])
    assert env.data == {"stopReason": 1, "contentBlock": {"partialJson": "x"}}  # nosec B101
