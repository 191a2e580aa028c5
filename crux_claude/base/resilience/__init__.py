"""Resilience primitives: retry for HTTP calls and polling for batch jobs."""

from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry
from .polling import PollPolicy, poll_until

__all__ = ["RetryConfig", "DEFAULT_RETRY_CONFIG", "retry", "PollPolicy", "poll_until"]
