"""Explicit polling policy for long-running remote jobs.

A :class:`PollPolicy` replaces ad-hoc sleep-and-recheck recursion with an
iterative loop that honours an interval, an overall deadline and an optional
:class:`~crux_claude.base.cancellation.CancellationToken`. Without an injected
``sleep`` the wait between polls blocks on the token, so a cancel from another
thread ends the wait at once.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ...config.defaults import (
    BATCH_DEFAULT_POLL_INTERVAL_SECONDS,
    BATCH_DEFAULT_TIMEOUT_SECONDS,
)
from ..cancellation import CancellationToken
from ..errors import ErrorCode, ProviderError

T = TypeVar("T")


@dataclass(frozen=True)
class PollPolicy:
    """Interval and deadline for :func:`poll_until` (seconds)."""

    interval_seconds: float = BATCH_DEFAULT_POLL_INTERVAL_SECONDS
    timeout_seconds: float = BATCH_DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if self.timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")


def poll_until(
    fetch: Callable[[], T],
    done: Callable[[T], bool],
    policy: PollPolicy = PollPolicy(),
    *,
    on_poll: Optional[Callable[[T], None]] = None,
    cancellation_token: Optional[CancellationToken] = None,
    clock: Optional[Callable[[], float]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call ``fetch`` until ``done(result)`` holds, then return the result.

    Raises:
        ProviderError: ``ErrorCode.TIMEOUT`` once the deadline has elapsed
            before a poll starts.
        CancelledError: when the token is cancelled between polls.
        Exception: anything raised by ``fetch`` propagates unchanged.
    """
    clock = clock or time.monotonic
    if sleep is None:
        sleep = cancellation_token.wait if cancellation_token is not None else time.sleep
    deadline = clock() + policy.timeout_seconds
    while True:
        if cancellation_token is not None:
            cancellation_token.raise_if_cancelled()
        if clock() > deadline:
            raise ProviderError(
                code=ErrorCode.TIMEOUT,
                message=f"polling timed out after {policy.timeout_seconds}s",
            )
        result = fetch()
        if on_poll is not None:
            on_poll(result)
        if done(result):
            return result
        sleep(policy.interval_seconds)


__all__ = ["PollPolicy", "poll_until"]
