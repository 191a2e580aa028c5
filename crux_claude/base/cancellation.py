"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` enables cooperative cancellation signalling for
long-running operations such as batch polling. ``CancelledError`` is raised by
operations that observe a cancellation request.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
