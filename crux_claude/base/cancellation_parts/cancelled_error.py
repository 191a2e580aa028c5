"""Cancellation error type.

Defines the public ``CancelledError`` raised when an operation observes a
cancellation request on its :class:`CancellationToken`.
"""

from __future__ import annotations

from typing import Optional


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    ``reason`` is the string passed to ``CancellationToken.cancel`` (``None``
    when no reason was given). Not a :class:`ProviderError`, so the retry
    policy never retries it.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or "operation cancelled")
        self.reason = reason


__all__ = ["CancelledError"]
