"""Payload key normalization.

Historical payloads (and some proxies) spell protocol fields in camelCase
(``contentBlock``, ``stopReason``, ``partialJson`` ...). The payload of every
known protocol event passes through :func:`normalize_payload` once, right after
JSON parsing, so consumers only ever look up the canonical snake_case key.
Payloads of unknown events are left untouched.

Tool ``input`` objects are caller data and are copied without renaming.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

CANONICAL_KEYS: Dict[str, str] = {
    "contentBlock": "content_block",
    "stopReason": "stop_reason",
    "stopSequence": "stop_sequence",
    "partialJson": "partial_json",
    "inputTokens": "input_tokens",
    "outputTokens": "output_tokens",
    "cacheCreationInputTokens": "cache_creation_input_tokens",
    "cacheReadInputTokens": "cache_read_input_tokens",
    "toolUseId": "tool_use_id",
    "isError": "is_error",
    "serviceTier": "service_tier",
}

_OPAQUE_FIELDS = frozenset(("input",))


def canonical_key(key: Any) -> str:
    """Return the canonical spelling of a payload key."""
    text = key if isinstance(key, str) else str(key)
    return CANONICAL_KEYS.get(text, text)


def normalize_payload(value: Any) -> Any:
    """Recursively canonicalize mapping keys inside a decoded payload.

    When both spellings of a field are present the canonical one wins.
    """
    if isinstance(value, Mapping):
        out: Dict[str, Any] = {}
        for key, item in value.items():
            name = canonical_key(key)
            if name != key and name in value:
                continue
            out[name] = item if name in _OPAQUE_FIELDS else normalize_payload(item)
        return out
    if isinstance(value, list):
        return [normalize_payload(item) for item in value]
    return value


__all__ = ["CANONICAL_KEYS", "canonical_key", "normalize_payload"]
