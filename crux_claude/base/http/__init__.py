"""HTTP collaborator package.

Exposes the ``httpx``-backed client used by the messages and batches APIs.
"""

from .client import AnthropicClient, HttpResult, RETRYABLE_STATUSES, raise_for_result

__all__ = ["AnthropicClient", "HttpResult", "RETRYABLE_STATUSES", "raise_for_result"]
