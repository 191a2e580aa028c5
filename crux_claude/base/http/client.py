"""HTTP collaborator for the Anthropic API.

Purpose:
    Wrap a single ``httpx.Client`` configured from an explicit
    :class:`~crux_claude.config.ClientConfig` and expose the two shapes the
    rest of the library needs:

    * ``send(method, path, body, options) -> HttpResult`` for ordinary JSON
      round trips (messages, token counting, batches).
    * ``stream(method, path, body, options)`` for Server-Sent-Events
      responses; yields the open ``httpx.Response`` whose ``iter_text()`` is
      the chunk source consumed by :mod:`crux_claude.streaming`.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client and transports.

Retry strategy:
    ``send`` retries transport failures and retryable statuses (429, 5xx,
    529 overloaded) via :func:`~crux_claude.base.resilience.retry`, waiting for
    the server's ``retry-after`` hint when one is sent. After the
    last attempt a retryable status is returned as a normal ``HttpResult`` so
    callers build the :class:`APIError` themselves. ``stream`` never retries:
    a response body can be consumed only once.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

import httpx

from ...config import ClientConfig
from ...config.defaults import CLIENT_USER_AGENT, DEFAULT_RETRY_DELAY_BASE
from ..errors import APIError, ProviderError, classify_exception, code_for_status, parse_retry_after
from ..logging import LogContext, get_logger, log_event
from ..resilience.retry import RetryConfig, retry

RETRYABLE_STATUSES = frozenset((408, 429, 500, 502, 503, 504, 529))


@dataclass(frozen=True)
class HttpResult:
    """Outcome of :meth:`AnthropicClient.send`.

    Attributes:
        status: HTTP status code.
        body: Decoded JSON body, or the raw text when the body is not JSON
            (or when decoding was disabled via ``options["decode"] = False``).
        headers: Response headers (lower-cased keys).
    """

    status: int
    body: Any
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def request_id(self) -> Optional[str]:
        return self.headers.get("request-id")


class _RetryableStatus(ProviderError):
    """Internal carrier used to route retryable statuses through ``retry``."""

    def __init__(self, result: HttpResult) -> None:
        super().__init__(
            code=code_for_status(result.status),
            message=f"status {result.status}",
            retryable=True,
            request_id=result.request_id,
            retry_after=parse_retry_after(result.headers),
        )
        self.result = result


def _decode_body(response: httpx.Response, decode: bool) -> Any:
    if not decode:
        return response.text
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class AnthropicClient:
    """Thin wrapper over ``httpx.Client`` carrying auth and version headers.

    Parameters:
        config: Resolved client configuration. Defaults to ``ClientConfig()``.
        transport: Optional ``httpx`` transport (``httpx.MockTransport`` in
            tests).
        http_client: Optional pre-built ``httpx.Client``; when provided the
            caller owns its lifecycle and ``close`` leaves it open.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            transport=transport,
        )
        self._logger = get_logger("crux_claude.http")
        self._retry_config = RetryConfig(
            max_attempts=self.config.max_retries,
            delay_base=DEFAULT_RETRY_DELAY_BASE,
            attempt_logger=self._log_attempt,
        )

    # ---- headers ----
    @property
    def headers(self) -> Dict[str, str]:
        """Default request headers derived from the configuration."""
        headers = {
            "user-agent": CLIENT_USER_AGENT,
            "anthropic-version": self.config.api_version,
            "content-type": "application/json",
        }
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key
        if self.config.beta:
            headers["anthropic-beta"] = ",".join(self.config.beta)
        return headers

    def _merged_headers(self, options: Mapping[str, Any]) -> Dict[str, str]:
        headers = self.headers
        extra = options.get("headers") or {}
        headers.update({str(k).lower(): str(v) for k, v in extra.items()})
        return headers

    def _log_attempt(self, *, attempt, max_attempts, delay, error) -> None:
        if error is None:
            return
        log_event(
            self._logger,
            "http.retry",
            LogContext(),
            attempt=attempt,
            max_attempts=max_attempts,
            delay=delay,
            error_code=error.code.value,
        )

    # ---- request/response ----
    def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> HttpResult:
        """Perform one JSON request and return its status and decoded body.

        ``options`` keys: ``params`` (query mapping), ``headers`` (extra
        headers), ``timeout`` (seconds), ``decode`` (bool, default True).

        Raises:
            ProviderError: transport failure after retries are exhausted.
        """
        opts: Mapping[str, Any] = options or {}
        params = {k: v for k, v in (opts.get("params") or {}).items() if v is not None}
        headers = self._merged_headers(opts)
        decode = opts.get("decode", True)
        timeout = opts.get("timeout", self.config.timeout_seconds)

        @retry(self._retry_config)
        def _attempt() -> HttpResult:
            try:
                response = self._http.request(
                    method.upper(),
                    path,
                    json=body,
                    params=params or None,
                    headers=headers,
                    timeout=timeout,
                )
            except httpx.HTTPError as exc:
                code = classify_exception(exc)
                raise ProviderError(
                    code=code,
                    message=str(exc) or exc.__class__.__name__,
                    retryable=code in self._retry_config.retryable_codes,
                    raw=exc,
                ) from exc
            result = HttpResult(
                status=response.status_code,
                body=_decode_body(response, decode),
                headers=dict(response.headers),
            )
            if response.status_code in RETRYABLE_STATUSES:
                raise _RetryableStatus(result)
            return result

        try:
            result = _attempt()
        except _RetryableStatus as exc:
            result = exc.result
        log_event(
            self._logger,
            "http.response",
            LogContext(request_id=result.request_id),
            level=logging.DEBUG,
            method=method.upper(),
            path=path,
            status=result.status,
        )
        return result

    @contextlib.contextmanager
    def stream(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Iterator[httpx.Response]:
        """Open a streamed response; the body is released when the context exits.

        Raises:
            APIError: the server answered with a non-2xx status.
            ProviderError: the connection could not be established.
        """
        opts: Mapping[str, Any] = options or {}
        headers = self._merged_headers(opts)
        headers["accept"] = "text/event-stream"
        timeout = httpx.Timeout(self.config.timeout_seconds, read=self.config.stream_timeout_seconds)
        opened = False
        try:
            with self._http.stream(method.upper(), path, json=body, headers=headers, timeout=timeout) as response:
                if not 200 <= response.status_code < 300:
                    response.read()
                    raise APIError.from_response(response.status_code, _decode_body(response, True), response.headers)
                log_event(
                    self._logger,
                    "http.stream.open",
                    LogContext(request_id=response.headers.get("request-id")),
                    level=logging.DEBUG,
                    method=method.upper(),
                    path=path,
                    status=response.status_code,
                )
                opened = True
                yield response
        except httpx.HTTPError as exc:
            if opened:
                raise
            raise ProviderError(code=classify_exception(exc), message=str(exc), raw=exc) from exc

    # ---- lifecycle ----
    def close(self) -> None:
        """Close the underlying ``httpx.Client`` when this instance owns it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "AnthropicClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def raise_for_result(result: HttpResult) -> HttpResult:
    """Return ``result`` when successful, otherwise raise :class:`APIError`."""
    if result.ok:
        return result
    raise APIError.from_response(result.status, result.body, result.headers)


__all__ = [
    "AnthropicClient",
    "HttpResult",
    "RETRYABLE_STATUSES",
    "raise_for_result",
]
