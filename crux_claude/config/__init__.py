"""Unified configuration layer for the client.

Goals
-----
* Centralize defaults (base URL, API version, timeouts, retries).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``CRUX_CLAUDE_CONFIG_FILE``
    3. Environment variables (``ANTHROPIC_API_KEY``, ``ANTHROPIC_BETA`` ...)
    4. In-code overrides passed to :func:`load_client_config`
* Produce an explicit, immutable :class:`ClientConfig` value that is threaded
  into client construction. There is no library-wide mutable default.

External Config File (Optional)
-------------------------------
JSON is attempted first, then YAML. Either the top level or an ``anthropic``
section may hold the fields:

```
anthropic:
  api_version: "2023-06-01"
  beta: ["prompt-caching-2024-07-31"]
  timeout_seconds: 30
```

Public API
----------
* ClientConfig
* load_client_config(overrides: dict | None = None) -> ClientConfig
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_API_VERSION,
    ANTHROPIC_DEFAULT_BASE_URL,
    CONFIG_FILE_ENV,
    DEFAULT_MAX_RETRIES,
    DEFAULT_STREAM_TIMEOUT_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)
from .env import resolve_env_value


@dataclass(frozen=True)
class ClientConfig:
    """Resolved client configuration.

    Attributes:
        api_key: API key sent as ``x-api-key``. May be ``None`` for clients
            that only talk to a local test transport.
        base_url: API root; relative endpoint paths are joined onto it.
        api_version: Value of the ``anthropic-version`` header.
        beta: Beta feature flags joined into ``anthropic-beta``.
        timeout_seconds: Timeout for ordinary requests.
        stream_timeout_seconds: Read timeout while waiting for stream chunks.
        max_retries: Attempts (including the first) for retryable failures.
    """

    api_key: Optional[str] = None
    base_url: str = ANTHROPIC_DEFAULT_BASE_URL
    api_version: str = ANTHROPIC_DEFAULT_API_VERSION
    beta: Tuple[str, ...] = field(default_factory=tuple)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    stream_timeout_seconds: float = DEFAULT_STREAM_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES

    def with_beta(self, *features: str) -> "ClientConfig":
        """Return a copy with ``features`` appended to ``beta`` (deduplicated)."""
        merged = tuple(dict.fromkeys(self.beta + tuple(f for f in features if f)))
        return replace(self, beta=merged)


_FIELD_NAMES = frozenset(f.name for f in fields(ClientConfig))


def _coerce_beta(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items: Sequence[Any] = value.split(",")
    else:
        items = list(value)
    return tuple(s for s in (str(i).strip() for i in items) if s)


def _coerce(name: str, value: Any) -> Any:
    if name == "beta":
        return _coerce_beta(value)
    if name in ("timeout_seconds", "stream_timeout_seconds"):
        return float(value)
    if name == "max_retries":
        return max(1, int(value))
    return value


def _load_external_config(path: Optional[str]) -> Dict[str, Any]:
    """Read the optional JSON/YAML config file; missing files yield ``{}``."""
    if not path:
        return {}
    p = Path(path).expanduser()
    if not p.is_file():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        return {}
    section = data.get("anthropic")
    return dict(section) if isinstance(section, dict) else data


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name in _FIELD_NAMES:
        value, _ = resolve_env_value(name)
        if value is not None:
            out[name] = value
    return out


def load_client_config(overrides: Optional[Mapping[str, Any]] = None) -> ClientConfig:
    """Return a merged :class:`ClientConfig`.

    Merge order (later wins): defaults -> external file -> env vars -> overrides.
    Unknown keys from any source are ignored; ``None`` overrides are skipped.
    """
    merged: Dict[str, Any] = {}
    merged |= _load_external_config(os.getenv(CONFIG_FILE_ENV))
    merged |= _env_overrides()
    if overrides:
        merged |= {k: v for k, v in overrides.items() if v is not None}
    kwargs = {k: _coerce(k, v) for k, v in merged.items() if k in _FIELD_NAMES}
    return ClientConfig(**kwargs)


__all__ = [
    "ClientConfig",
    "load_client_config",
]
