"""Synchronous HTTP client with bounded timeouts and response classification.

:class:`SyncClient` performs a single GET per call:

- **Timeouts** -- ``http_open_timeout``, ``http_read_timeout`` and
  ``http_ssl_timeout`` from the :class:`~distmatrix.models.Configuration`
  are applied when positive; anything else falls back to
  :data:`DEFAULT_TIMEOUT`. A call never waits forever.
- **Instrumentation** -- exactly one
  :class:`~distmatrix.instrumentation.RequestEvent` per attempt.
- **No retries, no pooling** -- a fresh :class:`httpx.Client` is opened and
  closed for every call.
- **Classification** -- in two tiers: HTTP status first, then the
  ``status`` field of a 2xx JSON body, because the service reports some
  client errors inside successful responses.

Outcome table::

    timeout / connection failure       -> ServerError
    414                                -> RequestTooLargeError
    other 4xx                          -> ClientError
    5xx                                -> ServerError
    any other non-2xx                  -> ServerError
    2xx with status in CLIENT_ERRORS   -> UpstreamStatusError (a ClientError)
    2xx with a non-JSON body           -> ServerError
    2xx otherwise                      -> parsed body
"""

from __future__ import annotations

import math
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx

from distmatrix.exceptions import (
    ClientError,
    RequestTooLargeError,
    ServerError,
    UpstreamStatusError,
)
from distmatrix.instrumentation import HookRunner, Instrumenter, instrument
from distmatrix.models import Configuration, RequestDescriptor
from distmatrix.url_builder import MAX_URL_SIZE, filter_sensitive

DEFAULT_TIMEOUT = 5.0
"""Seconds used for any timeout the configuration leaves unset."""

CLIENT_ERRORS = (
    "INVALID_REQUEST",
    "MAX_ELEMENTS_EXCEEDED",
    "OVER_QUERY_LIMIT",
    "REQUEST_DENIED",
    "UNKNOWN_ERROR",
)
"""Body ``status`` values that turn a 2xx response into a client error."""


class SyncClient:
    """Blocking HTTP client for the distance matrix endpoint.

    Args:
        instrumenters: Observers notified once per request attempt.
        transport: Optional :class:`httpx.BaseTransport`, mainly for
            tests (:class:`httpx.MockTransport`).

    Example::

        client = SyncClient(instrumenters=[LogSubscriber()])
        data = client.get(descriptor, instrumentation={"elements": 4})
    """

    def __init__(
        self,
        instrumenters: Optional[list[Instrumenter]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._hooks = HookRunner(instrumenters or [])
        self._transport = transport

    def get(
        self,
        descriptor: RequestDescriptor,
        instrumentation: Optional[dict[str, Any]] = None,
        configuration: Optional[Configuration] = None,
    ) -> dict[str, Any]:
        """Send the request and return the parsed response body.

        Args:
            descriptor: The request to send.
            instrumentation: Extra fields copied into the request event.
            configuration: Source of the timeout settings; defaults apply
                when ``None``.

        Returns:
            The decoded JSON body.

        Raises:
            RequestTooLargeError: On HTTP 414.
            ClientError: On other 4xx, or a 2xx whose body reports an error.
            ServerError: On 5xx, unexpected statuses, unparsable bodies,
                timeouts and connection failures.
        """
        url = descriptor.url
        timeout = build_timeout(configuration, urlsplit(url).scheme)

        with instrument(self._hooks, url, instrumentation) as event:
            try:
                with httpx.Client(timeout=timeout, transport=self._transport) as http:
                    response = http.get(url)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                raise ServerError(
                    f"Request to {filter_sensitive(url)} failed: {exc!r}"
                ) from exc

            event.status_code = response.status_code
            return self._handle(response, url)

    # ------------------------------------------------------------------ #
    # Classification
    # ------------------------------------------------------------------ #

    def _handle(self, response: httpx.Response, url: str) -> dict[str, Any]:
        status = response.status_code
        if 200 <= status < 300:
            return self._inspect_for_client_errors(response)

        message = _describe(response)
        if status == 414:
            raise RequestTooLargeError(url, MAX_URL_SIZE, response)
        if 400 <= status < 500:
            raise ClientError(message, response=response)
        if 500 <= status < 600:
            raise ServerError(message, response=response)
        # 1xx / 3xx: not something this endpoint should answer.
        raise ServerError(f"Unexpected response. {message}", response=response)

    def _inspect_for_client_errors(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise ServerError(
                f"HTTP {response.status_code}: response body is not JSON", response=response
            ) from exc

        if not isinstance(data, dict):
            raise ServerError(
                f"HTTP {response.status_code}: expected a JSON object", response=response
            )

        status = data.get("status")
        if status in CLIENT_ERRORS:
            detail = data.get("error_message")
            message = f"{status}: {detail}" if detail else status
            raise UpstreamStatusError(message, response=response, status=status)
        return data


def build_timeout(configuration: Optional[Configuration], scheme: str = "https") -> httpx.Timeout:
    """Translate configuration timeouts into an :class:`httpx.Timeout`.

    httpx performs the TLS handshake inside its connect phase, so a
    positive ``http_ssl_timeout`` extends the connect budget for https.
    """
    if configuration is None:
        return httpx.Timeout(DEFAULT_TIMEOUT)

    open_timeout = _positive(configuration.http_open_timeout)
    read_timeout = _positive(configuration.http_read_timeout)
    ssl_timeout = _positive(configuration.http_ssl_timeout) if scheme == "https" else None

    connect = DEFAULT_TIMEOUT if open_timeout is None else open_timeout
    if ssl_timeout is not None:
        connect += ssl_timeout

    return httpx.Timeout(
        DEFAULT_TIMEOUT,
        connect=connect,
        read=DEFAULT_TIMEOUT if read_timeout is None else read_timeout,
    )


def _positive(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) and number > 0 else None


def _describe(response: httpx.Response) -> str:
    """``HTTP 400: <body snippet>`` for error messages."""
    text = response.text[:200] if response.content else ""
    prefix = f"HTTP {response.status_code}"
    return f"{prefix}: {text}" if text else prefix
