"""Exception hierarchy for distmatrix.

All exceptions inherit from :class:`DistanceMatrixError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`distmatrix.exit_codes`.
Library callers catch the specific subclasses; the CLI entry point in
:func:`distmatrix.app.main` catches ``DistanceMatrixError`` and exits with
the matching code.

Subclass hierarchy::

    DistanceMatrixError             (exit 1)
    +-- InvalidConfigurationError   (exit 2)
    +-- InvalidRequestError         (exit 2)
    +-- RequestTooLargeError        (exit 7)
    +-- ClientError                 (exit 3)
    |   +-- UpstreamStatusError     (exit 3)
    +-- ServerError                 (exit 5)
    +-- ConfigError                 (exit 1)

``ClientError`` is never worth retrying as-is: the same request fails the
same way. ``ServerError`` is safe to retry with backoff at the caller's
discretion; nothing in this package retries internally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from distmatrix.exit_codes import (
    EXIT_CLIENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REQUEST_TOO_LARGE,
    EXIT_SERVER_ERROR,
)

if TYPE_CHECKING:
    import httpx

    from distmatrix.models import FieldError


class DistanceMatrixError(Exception):
    """Base exception for all distmatrix errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidConfigurationError(DistanceMatrixError):
    """Raised when a request is built from a configuration that fails validation.

    Attributes:
        errors: One :class:`~distmatrix.models.FieldError` per rejected field.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        details = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Invalid configuration: {details}")


class InvalidRequestError(DistanceMatrixError):
    """Raised when a request cannot be built (e.g. no origins or destinations)."""

    exit_code = EXIT_INVALID_USAGE


class RequestTooLargeError(DistanceMatrixError):
    """Raised when the request URL exceeds the maximum size.

    Raised locally by the URL builder before any network call, or by the
    client when the service answers ``414 Request-URI Too Long``. Shrink
    the set of origins / destinations and try again.

    Attributes:
        url: The offending URL.
        max_size: The configured maximum URL length.
        response: The HTTP response, when the service reported it.
    """

    exit_code = EXIT_REQUEST_TOO_LARGE

    def __init__(
        self,
        url: str,
        max_size: int,
        response: Optional[httpx.Response] = None,
    ):
        self.url = url
        self.max_size = max_size
        self.response = response
        super().__init__(
            f"Request URL is {len(url)} characters, maximum is {max_size}"
        )


class ClientError(DistanceMatrixError):
    """Raised when the service rejects the request (HTTP 4xx).

    Attributes:
        response: The raw :class:`httpx.Response`.
        status: The service ``status`` string when one was reported.
    """

    exit_code = EXIT_CLIENT_ERROR

    def __init__(
        self,
        message: str,
        response: Optional[httpx.Response] = None,
        status: Optional[str] = None,
    ):
        self.response = response
        self.status = status
        super().__init__(message)

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status code of the response, if any."""
        return self.response.status_code if self.response is not None else None


class UpstreamStatusError(ClientError):
    """Raised for a 2xx response whose body carries an error ``status``.

    The service reports some client errors (``OVER_QUERY_LIMIT``,
    ``REQUEST_DENIED``, ...) inside an otherwise successful response.
    """


class ServerError(DistanceMatrixError):
    """Raised on 5xx, unexpected statuses, and transport failures (timeouts, refused connections).

    Attributes:
        response: The raw :class:`httpx.Response`, or ``None`` when the
            request never produced one.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, response: Optional[Any] = None):
        self.response = response
        super().__init__(message)


class ConfigError(DistanceMatrixError):
    """Raised for settings problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
