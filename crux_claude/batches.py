"""
Message Batches API.

Batches process many Messages API requests asynchronously (up to 24 hours).
Each request entry is ``{"custom_id": str, "params": <message request body>}``;
results are downloaded as JSON Lines once ``processing_status`` is ``"ended"``.

All functions take an :class:`~crux_claude.base.http.AnthropicClient` and
raise :class:`~crux_claude.base.errors.APIError` on non-2xx responses.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .base.cancellation import CancellationToken
from .base.errors import ErrorCode, ProviderError
from .base.http import AnthropicClient, raise_for_result
from .base.logging import LogContext, get_logger, log_event
from .base.resilience import PollPolicy, poll_until
from .config.defaults import BATCH_LIST_MAX_LIMIT
from .messages.request import MessageRequest

BATCHES_PATH = "messages/batches"
ENDED_STATUS = "ended"

BatchRequest = Mapping[str, Any]

_logger = get_logger("crux_claude.batches")


def _path(batch_id: str, suffix: str = "") -> str:
    if not batch_id:
        raise ValueError("batch_id must be non-empty")
    return f"{BATCHES_PATH}/{batch_id}{suffix}"


def _body(result_body: Any) -> Dict[str, Any]:
    if not isinstance(result_body, Mapping):
        raise ProviderError(code=ErrorCode.INTERNAL, message="unexpected batches response body", raw=result_body)
    return dict(result_body)


def batch_request(custom_id: str, params: Union[MessageRequest, Mapping[str, Any]]) -> Dict[str, Any]:
    """Build one batch entry from a request model or payload mapping."""
    payload = params.to_payload() if isinstance(params, MessageRequest) else dict(params)
    return {"custom_id": custom_id, "params": payload}


def create(client: AnthropicClient, requests: Iterable[BatchRequest]) -> Dict[str, Any]:
    """Submit a batch; returns the batch object (``id``, ``processing_status``...)."""
    entries = [dict(r) for r in requests]
    result = raise_for_result(client.send("POST", BATCHES_PATH, {"requests": entries}))
    batch = _body(result.body)
    log_event(
        _logger,
        "batches.create",
        LogContext(batch_id=batch.get("id"), request_id=result.request_id),
        requests=len(entries),
        processing_status=batch.get("processing_status"),
    )
    return batch


def get(client: AnthropicClient, batch_id: str) -> Dict[str, Any]:
    result = raise_for_result(client.send("GET", _path(batch_id)))
    return _body(result.body)


def parse_results(text: str, *, batch_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Parse a JSON Lines results document.

    Blank lines are ignored; lines that are not a JSON object are skipped and
    logged at debug level.
    """
    results: List[Dict[str, Any]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            item = json.loads(line)
        except ValueError:
            item = None
        if not isinstance(item, dict):
            log_event(
                _logger,
                "batches.results.skipped_line",
                LogContext(batch_id=batch_id),
                level=logging.DEBUG,
                line=lineno,
            )
            continue
        results.append(item)
    return results


def get_results(client: AnthropicClient, batch_id: str) -> List[Dict[str, Any]]:
    """Download and parse the results of an ended batch.

    Each entry carries ``custom_id`` and ``result`` (``type`` of
    ``succeeded``, ``errored``, ``canceled`` or ``expired``).
    """
    result = raise_for_result(client.send("GET", _path(batch_id, "/results"), options={"decode": False}))
    return parse_results(result.body or "", batch_id=batch_id)


def list_batches(
    client: AnthropicClient,
    limit: Optional[int] = None,
    before_id: Optional[str] = None,
    after_id: Optional[str] = None,
) -> Dict[str, Any]:
    """List batches, newest first; the page carries ``data``, ``has_more``, ``first_id`` and ``last_id``."""
    if limit is not None and not 1 <= limit <= BATCH_LIST_MAX_LIMIT:
        raise ValueError(f"limit must be between 1 and {BATCH_LIST_MAX_LIMIT}")
    params = {"limit": limit, "before_id": before_id, "after_id": after_id}
    result = raise_for_result(client.send("GET", BATCHES_PATH, options={"params": params}))
    return _body(result.body)


def cancel(client: AnthropicClient, batch_id: str) -> Dict[str, Any]:
    """Request cancellation; requests already in flight still complete."""
    result = raise_for_result(client.send("POST", _path(batch_id, "/cancel"), {}))
    log_event(_logger, "batches.cancel", LogContext(batch_id=batch_id))
    return _body(result.body)


def delete(client: AnthropicClient, batch_id: str) -> Dict[str, Any]:
    """Delete a batch and its results. Irreversible."""
    result = raise_for_result(client.send("DELETE", _path(batch_id)))
    log_event(_logger, "batches.delete", LogContext(batch_id=batch_id))
    return _body(result.body)


def is_ended(batch: Mapping[str, Any]) -> bool:
    return batch.get("processing_status") == ENDED_STATUS


def wait_for_completion(
    client: AnthropicClient,
    batch_id: str,
    policy: PollPolicy = PollPolicy(),
    on_poll: Optional[Callable[[Dict[str, Any]], None]] = None,
    cancellation_token: Optional[CancellationToken] = None,
    *,
    sleep: Optional[Callable[[float], None]] = None,
) -> Dict[str, Any]:
    """Poll :func:`get` until the batch has ended and return it.

    Raises:
        ProviderError: ``ErrorCode.TIMEOUT`` when ``policy.timeout_seconds``
            elapses first.
        CancelledError: the token was cancelled between polls.
        APIError: a status check failed.
    """

    ctx = LogContext(batch_id=batch_id)
    polls = 0

    def _on_poll(batch: Dict[str, Any]) -> None:
        nonlocal polls
        polls += 1
        log_event(
            _logger,
            "batches.poll",
            ctx.with_extra(poll=polls),
            level=logging.DEBUG,
            processing_status=batch.get("processing_status"),
        )
        if on_poll is not None:
            on_poll(batch)

    batch = poll_until(
        lambda: get(client, batch_id),
        is_ended,
        policy,
        on_poll=_on_poll,
        cancellation_token=cancellation_token,
        sleep=sleep,
    )
    log_event(_logger, "batches.ended", ctx.with_extra(polls=polls), request_counts=batch.get("request_counts"))
    return batch


__all__ = [
    "BATCHES_PATH",
    "batch_request",
    "create",
    "get",
    "get_results",
    "parse_results",
    "list_batches",
    "cancel",
    "delete",
    "is_ended",
    "wait_for_completion",
]
