"""crux_claude.config.defaults
===========================

Central place for small, stable default values used across the client. These
defaults can be overridden via environment variables, an external
configuration file, or explicit overrides, but provide sensible fallbacks for
local development and tests.

This module intentionally avoids importing from other packages to prevent
circular dependencies. Only plain constants should live here.
"""

from __future__ import annotations

# ---- HTTP / API ----
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1/"
ANTHROPIC_DEFAULT_API_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
CLIENT_USER_AGENT = "crux-claude"

# Request timeout for ordinary (non-streaming) calls, in seconds.
DEFAULT_TIMEOUT_SECONDS = 60.0
# Read timeout between chunks of a streamed response, in seconds.
DEFAULT_STREAM_TIMEOUT_SECONDS = 120.0
# Attempts (including the first) for retryable failures of ``send``.
DEFAULT_MAX_RETRIES = 3
# Exponential backoff base in seconds (delay = base ** attempt).
DEFAULT_RETRY_DELAY_BASE = 2.0

# ---- Batches ----
BATCH_DEFAULT_POLL_INTERVAL_SECONDS = 30.0
BATCH_DEFAULT_TIMEOUT_SECONDS = 86_400.0
BATCH_LIST_MAX_LIMIT = 100

# ---- Configuration sources ----
CONFIG_FILE_ENV = "CRUX_CLAUDE_CONFIG_FILE"


__all__ = [
    "ANTHROPIC_DEFAULT_BASE_URL",
    "ANTHROPIC_DEFAULT_API_VERSION",
    "ANTHROPIC_DEFAULT_MODEL",
    "CLIENT_USER_AGENT",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_STREAM_TIMEOUT_SECONDS",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_DELAY_BASE",
    "BATCH_DEFAULT_POLL_INTERVAL_SECONDS",
    "BATCH_DEFAULT_TIMEOUT_SECONDS",
    "BATCH_LIST_MAX_LIMIT",
    "CONFIG_FILE_ENV",
]
