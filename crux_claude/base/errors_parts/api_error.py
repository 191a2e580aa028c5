"""
API error raised for non-success HTTP responses from the Messages API.

The server reports failures as ``{"type": "error", "error": {"type": ...,
"message": ...}}``. :meth:`APIError.from_response` lifts that body into a
:class:`ProviderError` subclass so callers can branch on either the normalized
``code`` or the server's own ``type`` string.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .classification import code_for_status
from .error_code import ErrorCode
from .provider_error import ProviderError


KNOWN_ERROR_TYPES = (
    "invalid_request_error",
    "authentication_error",
    "permission_error",
    "not_found_error",
    "rate_limit_error",
    "api_error",
    "overloaded_error",
)

_TYPE_TO_CODE: Dict[str, ErrorCode] = {
    "invalid_request_error": ErrorCode.VALIDATION,
    "authentication_error": ErrorCode.AUTH,
    "permission_error": ErrorCode.AUTH,
    "not_found_error": ErrorCode.NOT_FOUND,
    "rate_limit_error": ErrorCode.RATE_LIMIT,
    "api_error": ErrorCode.SERVER_ERROR,
    "overloaded_error": ErrorCode.OVERLOADED,
}


def parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[float]:
    """Seconds from a ``retry-after`` header; ``None`` when absent or not numeric."""
    if not headers:
        return None
    value = headers.get("retry-after")
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


class APIError(ProviderError):
    """Error response returned by the Anthropic API.

    Attributes (in addition to :class:`ProviderError`):
        type: Server error type (one of ``KNOWN_ERROR_TYPES`` or the raw
            unknown string).
        status_code: HTTP status of the response.
        raw_body: Decoded response body (mapping) or ``None``.
    """

    def __init__(
        self,
        *,
        type: str,
        message: str,
        status_code: int,
        raw_body: Optional[Any] = None,
        code: Optional[ErrorCode] = None,
        request_id: Optional[str] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        resolved = code or _TYPE_TO_CODE.get(type, ErrorCode.UNKNOWN)
        super().__init__(
            code=resolved,
            message=message,
            retryable=resolved.is_retryable,
            request_id=request_id,
            retry_after=retry_after,
        )
        self.type = type
        self.status_code = status_code
        self.raw_body = raw_body

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "APIError":
        """Build an :class:`APIError` from an HTTP status, decoded body and headers.

        Non-mapping bodies (plain text gateways, empty responses) still yield an
        error with type ``api_error`` and the default message.
        """
        info: Mapping[str, Any] = {}
        if isinstance(body, Mapping):
            candidate = body.get("error")
            if isinstance(candidate, Mapping):
                info = candidate
        declared = info.get("type")
        err_type = declared if isinstance(declared, str) and declared else "api_error"
        message = info.get("message") or "Unknown error"
        code = _TYPE_TO_CODE.get(err_type) if err_type is declared else None
        return cls(
            type=err_type,
            message=str(message),
            status_code=status_code,
            raw_body=body if isinstance(body, Mapping) else None,
            code=code or code_for_status(status_code),
            request_id=(headers or {}).get("request-id"),
            retry_after=parse_retry_after(headers),
        )

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.type}: {self.message}"

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"APIError(status_code={self.status_code!r}, type={self.type!r}, message={self.message!r})"


__all__ = ["APIError", "KNOWN_ERROR_TYPES", "parse_retry_after"]
