"""crux_claude.config.env
======================

Environment variable mapping for client configuration.

Design Notes
------------
- ``ENV_FIELD_MAP`` maps :class:`ClientConfig` field names to their ordered
  candidate environment variables (canonical first).
- Helpers never raise on unset variables; callers decide how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

ENV_FIELD_MAP: Dict[str, Tuple[str, ...]] = {
    "api_key": ("ANTHROPIC_API_KEY",),  # pragma: allowlist secret - env var name, not a secret
    "base_url": ("ANTHROPIC_BASE_URL",),
    "api_version": ("ANTHROPIC_VERSION", "ANTHROPIC_API_VERSION"),
    "beta": ("ANTHROPIC_BETA",),
    "timeout_seconds": ("CRUX_CLAUDE_TIMEOUT_SECONDS",),
    "stream_timeout_seconds": ("CRUX_CLAUDE_STREAM_TIMEOUT_SECONDS",),
    "max_retries": ("CRUX_CLAUDE_MAX_RETRIES",),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', or 'your-api-key'. The
    check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "your-api-key" in v


def get_env_var_candidates(field: str) -> Iterable[str]:
    """Yield acceptable environment variable names for a config field."""
    yield from ENV_FIELD_MAP.get(field, ())


def resolve_env_value(field: str) -> Tuple[Optional[str], Optional[str]]:
    """Resolve a config field from the process environment.

    Returns
    -------
    Tuple[Optional[str], Optional[str]]
        (value, env_var_used) for the first non-empty, non-placeholder
        candidate; (None, None) when nothing is set.
    """
    for name in get_env_var_candidates(field):
        val = os.environ.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_FIELD_MAP",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_env_value",
]
