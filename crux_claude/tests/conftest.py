"""Shared fixtures for the crux_claude test suite.

Provides Server-Sent-Events body builders, an ``AnthropicClient`` factory
backed by ``httpx.MockTransport``, fast retry sleeps and JSON log capture.
"""
from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import httpx
import pytest

from crux_claude.base.http import AnthropicClient
from crux_claude.base.logging import get_logger
from crux_claude.config import ClientConfig

Frame = Tuple[str, Optional[Any]]


def _encode_frame(name: str, data: Optional[Any]) -> str:
    lines = [f"event: {name}"]
    if data is not None:
        lines.append("data: " + (data if isinstance(data, str) else json.dumps(data)))
    return "\n".join(lines) + "\n\n"


@pytest.fixture()
def sse_body() -> Callable[[Iterable[Frame]], str]:
    """Return a function rendering ``(event, data)`` pairs as an SSE body.

    ``data`` may be a JSON-serializable value, a raw string (sent verbatim) or
    ``None`` (no data line).
    """

    def _render(frames: Iterable[Frame]) -> str:
        return "".join(_encode_frame(name, data) for name, data in frames)

    return _render


@pytest.fixture()
def hello_frames() -> List[Frame]:
    """The canonical one-block text stream."""
    return [
        ("message_start", {"message": {"id": "msg_1", "role": "assistant"}}),
        ("content_block_start", {"index": 0, "content_block": {"type": "text", "text": ""}}),
        ("content_block_delta", {"index": 0, "delta": {"type": "text_delta", "text": "Hi!"}}),
        ("content_block_stop", {"index": 0}),
        ("message_delta", {"delta": {"stop_reason": "end_turn"}, "usage": {"output_tokens": 3}}),
        ("message_stop", None),
    ]


@pytest.fixture()
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Replace ``time.sleep`` with a recorder so retries and polls are instant."""
    calls: List[float] = []
    monkeypatch.setattr(time, "sleep", lambda seconds: calls.append(seconds))
    return calls


@pytest.fixture()
def make_client() -> Iterator[Callable[..., AnthropicClient]]:
    """Factory building a client whose HTTP traffic goes to ``handler``."""
    clients: List[AnthropicClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **config: Any) -> AnthropicClient:
        cfg: Dict[str, Any] = {"api_key": "sk-test", "max_retries": 1}
        cfg.update(config)
        client = AnthropicClient(ClientConfig(**cfg), transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def log_lines(capsys: pytest.CaptureFixture[str]) -> Callable[[], List[Dict[str, Any]]]:
    """Return a reader for JSON log lines written to stderr during the test."""
    get_logger()  # bind the shared handler to the captured stderr

    def _read() -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for line in capsys.readouterr().err.splitlines():
            line = line.strip()
            if line.startswith("{"):
                out.append(json.loads(line))
        return out

    return _read
