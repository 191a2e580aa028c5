"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `crux_claude.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .api_error import APIError, KNOWN_ERROR_TYPES, parse_retry_after
from .classification import classify_exception, code_for_status
from .stream_errors import (
    FrameDecodeError,
    StreamError,
    StreamTransportError,
    TruncatedStreamError,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "APIError",
    "KNOWN_ERROR_TYPES",
    "parse_retry_after",
    "classify_exception",
    "code_for_status",
    "StreamError",
    "FrameDecodeError",
    "TruncatedStreamError",
    "StreamTransportError",
]
