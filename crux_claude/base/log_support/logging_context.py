"""Structured logging context object.

:class:`LogContext` carries the correlation fields shared by client log
events: the model, the ``request-id`` header, the message id of a response
and the batch id of a batch operation. ``to_dict`` flattens ``extra`` into the
top level and prunes ``None`` values so absent ids never show up as ``null``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Correlation fields merged into every ``log_event`` line."""

    provider: Optional[str] = "anthropic"
    model: Optional[str] = None
    request_id: Optional[str] = None
    message_id: Optional[str] = None
    batch_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def with_extra(self, **fields: Any) -> "LogContext":
        """Copy with ``fields`` merged into ``extra``."""
        return replace(self, extra={**self.extra, **fields})

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
