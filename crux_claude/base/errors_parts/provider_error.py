"""
Structured client error exception type.

Every failure surfaced by the HTTP collaborator, the batches helpers and the
polling loop is a :class:`ProviderError` (or a subclass) carrying a
normalized :class:`ErrorCode` plus whatever the server told us about it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """A failure with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification.
        message: Human-readable message suitable for logging.
        provider: Always ``"anthropic"`` for this client; kept for log parity.
        model: Model the failing request targeted, when known.
        retryable: Hint for callers deciding whether to try again.
        raw: Original exception or body, for diagnostics.
        request_id: Value of the ``request-id`` response header, when a
            response was received.
        retry_after: Server-suggested wait in seconds (``retry-after``).
    """

    code: ErrorCode
    message: str
    provider: str = "anthropic"
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Any] = None
    request_id: Optional[str] = None
    retry_after: Optional[float] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
