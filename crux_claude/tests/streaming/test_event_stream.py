"""Event stream composition, text accumulation and event filtering.

# nosec B101 - plain asserts are idiomatic in pytest
"""
from __future__ import annotations

import httpx
import pytest

from crux_claude.base.errors import FrameDecodeError, StreamTransportError, TruncatedStreamError
from crux_claude.streaming import EventEnvelope, accumulate_text, filter_events, parse_events


def _envelopes(results):
    return [r.envelope for r in results]


def _chunked(text, size):
    return [text[i : i + size] for i in range(0, len(text), size)]


@pytest.mark.parametrize("size", [1, 2, 3, 7, 64])
def test_chunk_boundaries_do_not_change_the_event_sequence(sse_body, hello_frames, size):
    body = sse_body(hello_frames)
    whole = _envelopes(parse_events([body]))
    assert _envelopes(parse_events(_chunked(body, size))) == whole  # nosec B101
    assert _envelopes(parse_events(_chunked(body.encode("utf-8"), size))) == whole  # nosec B101
    assert [e.event for e in whole] == [name for name, _ in hello_frames]  # nosec B101


def test_text_fragments_are_yielded_in_order(sse_body):
    frames = [("content_block_start", {"index": 0, "content_block": {"type": "text", "text": ""}})]
    frames += [
        ("content_block_delta", {"index": 0, "delta": {"type": "text_delta", "text": t}})
        for t in ("He", "llo", " world")
    ]
    fragments = list(accumulate_text(parse_events([sse_body(frames)])))
    assert fragments == ["He", "llo", " world"]  # nosec B101
    assert "".join(fragments) == "Hello world"  # nosec B101


def test_text_view_skips_other_delta_kinds_and_event_names(sse_body):
    frames = [
        ("content_block_delta", {"index": 0, "delta": {"type": "thinking_delta", "thinking": "hmm"}}),
        ("content_block_delta", {"index": 1, "delta": {"type": "input_json_delta", "partialJson": "{"}}),
        ("content_block_delta", {"index": 2, "delta": {"type": "text_delta", "text": "ok"}}),
        ("contentBlockDelta", {"delta": {"type": "text_delta", "text": "not a delta event"}}),
    ]
    assert list(accumulate_text(parse_events([sse_body(frames)]))) == ["ok"]  # nosec B101


def test_unknown_events_are_forwarded_unmodified(sse_body):
    payload = {
        "anything": [1, {"x": None}],
        "stopReason": 1,
        "isError": True,
        "contentBlock": {"partialJson": "x"},
        "stop_sequence": "kept",
        "stopSequence": "also kept",
    }
    frames = [
        ("future_event_type", payload),
        ("content_block_delta", {"index": 0, "delta": {"type": "text_delta", "text": "still here"}}),
    ]
    results = list(parse_events([sse_body(frames)]))
    assert results[0].envelope == EventEnvelope(event="future_event_type", data=payload)  # nosec B101
    assert list(accumulate_text(iter(results))) == ["still here"]  # nosec B101


def test_decode_failures_are_elements_not_exceptions():
    body = "data: {\"orphan\": true}\n\nevent: ping\n\n"
    results = list(parse_events([body]))
    assert [r.ok for r in results] == [False, True]  # nosec B101
    assert isinstance(results[0].error, FrameDecodeError)  # nosec B101
    with pytest.raises(FrameDecodeError):
        results[0].unwrap()
    assert results[1].event == "ping"  # nosec B101


def test_truncated_tail_becomes_failure_element_when_strict():
    results = list(parse_events(["event: ping\n\ngarbage"], drop_truncated=False))
    assert results[0].event == "ping"  # nosec B101
    assert isinstance(results[-1].error, TruncatedStreamError)  # nosec B101


def test_transport_error_ends_the_stream_with_a_failure_element():
    def chunks():
        yield "event: ping\n\n"
        raise httpx.ReadError("connection reset")

    results = list(parse_events(chunks()))
    assert results[0].event == "ping"  # nosec B101
    assert isinstance(results[1].error, StreamTransportError)  # nosec B101
    assert isinstance(results[1].error.cause, httpx.ReadError)  # nosec B101
    assert len(results) == 2  # nosec B101


def test_filter_preserves_order_and_drops_failures():
    body = "event: a\n\nevent: b\n\ndata: 1\n\nevent: a\ndata: 2\n\nevent: c\n\n"
    kept = list(filter_events(parse_events([body]), {"a", "c"}))
    assert [(r.event, r.data) for r in kept] == [("a", None), ("a", 2), ("c", None)]  # nosec B101
    assert [r.event for r in filter_events(parse_events([body]), "b")] == ["b"]  # nosec B101


def test_views_are_lazy_and_closing_releases_the_source():
    state = {"pulled": 0, "closed": False}

    def chunks():
        try:
            for i in range(100):
                state["pulled"] += 1
                yield f'event: content_block_delta\ndata: {{"delta": {{"type": "text_delta", "text": "{i}"}}}}\n\n'
        finally:
            state["closed"] = True

    texts = accumulate_text(parse_events(chunks()))
    assert state["pulled"] == 0  # nosec B101
    assert next(texts) == "0"  # nosec B101
    assert state["pulled"] == 1  # nosec B101
    texts.close()
    assert state["closed"]  # nosec B101


def test_known_event_payloads_are_normalized(sse_body):
    frames = [("message_delta", {"delta": {"stopReason": "end_turn"}, "usage": {"outputTokens": 2}})]
    (result,) = parse_events([sse_body(frames)])
    assert result.data == {"delta": {"stop_reason": "end_turn"}, "usage": {"output_tokens": 2}}  # nosec B101


@pytest.mark.parametrize("size", [1, 5, 1000])
def test_bare_carriage_return_line_breaks(size):
    body = 'event: message_start\rdata: {"message": {"id": "m"}}\r\revent: message_stop\r\r'
    results = list(parse_events(_chunked(body, size)))
    assert [r.event for r in results] == ["message_start", "message_stop"]  # nosec B101
    assert results[0].data == {"message": {"id": "m"}}  # nosec B101
