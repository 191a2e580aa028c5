"""Unified client error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``crux_claude.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.api_error import APIError, KNOWN_ERROR_TYPES, parse_retry_after
from .errors_parts.classification import classify_exception, code_for_status
from .errors_parts.stream_errors import (
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
