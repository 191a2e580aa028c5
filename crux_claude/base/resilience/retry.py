"""Retry policy for HTTP calls.

``retry(config)`` decorates any callable that signals
failure by raising :class:`ProviderError`. A failure is retried when its code
is in ``config.retryable_codes`` and attempts remain. The wait before the next
attempt is the server's ``retry_after`` hint when the error carries one,
otherwise ``delay_base ** attempt``, capped at ``max_delay``.
"""
from __future__ import annotations

import functools
import time
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

from ..errors import ErrorCode, ProviderError

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: ProviderError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    delay_base: float = 2.0  # exponential base (base**attempt)
    max_delay: float = 60.0
    retryable_codes: tuple[ErrorCode, ...] = tuple(code for code in ErrorCode if code.is_retryable)
    attempt_logger: AttemptLogger | None = None
    sleep: Callable[[float], None] | None = None

    def should_retry(self, error: ProviderError, attempt: int) -> bool:
        return error.code in self.retryable_codes and attempt + 1 < self.max_attempts

    def delay_for(self, attempt: int, error: ProviderError) -> float:
        hint = error.retry_after
        if hint is not None and hint >= 0:
            return min(hint, self.max_delay)
        return min(self.delay_base**attempt, self.max_delay)


DEFAULT_RETRY_CONFIG = RetryConfig()


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Return a decorator applying ``config`` to the wrapped callable.

    Non-retryable errors and the error of the last attempt propagate
    unchanged. The attempt logger sees every attempt; ``delay`` is ``None``
    when no further attempt follows.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempts = max(1, config.max_attempts)
            for attempt in range(attempts):
                try:
                    result = func(*args, **kwargs)
                except ProviderError as e:
                    delay = config.delay_for(attempt, e) if config.should_retry(e, attempt) else None
                    if config.attempt_logger:
                        config.attempt_logger(attempt=attempt, max_attempts=attempts, delay=delay, error=e)
                    if delay is None:
                        raise
                    (config.sleep or time.sleep)(delay)
                    continue
                if config.attempt_logger:
                    config.attempt_logger(attempt=attempt, max_attempts=attempts, delay=None, error=None)
                return result
            raise RuntimeError("retry: loop exited without a result")  # pragma: no cover

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "retry",
]
