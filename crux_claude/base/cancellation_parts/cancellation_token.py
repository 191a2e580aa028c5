"""Cooperative cancellation token implementation."""

from __future__ import annotations

import threading
from typing import List, Optional

from .cancelled_error import CancelledError


class CancellationToken:
    """A cooperative cancellation token with cascading children.

    Backed by a :class:`threading.Event`: ``cancel`` may be called from any
    thread, and a loop blocked in :meth:`wait` wakes up immediately instead
    of sleeping out its interval. Cancelling a token cancels its children;
    cancelling a child leaves the parent untouched.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None
        self._lock = threading.Lock()
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation; the first reason given is kept."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            children = list(self._children)
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link ``token`` so cancellation cascades to it (returns ``token``)."""
        with self._lock:
            self._children.append(token)
            cancelled = self._event.is_set()
        if cancelled:
            token.cancel(self._reason)
        return token

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; returns ``True`` if cancelled meanwhile."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError(self._reason)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self.cancelled}, reason={self._reason!r}, children={len(self._children)})"


__all__ = ["CancellationToken"]
