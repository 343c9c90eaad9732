"""End-to-end request pipeline.

:class:`DistanceMatrixAPI` wires the pieces together::

    Configuration + places
        -> UrlBuilder      (validate, canonical URL, size bound, cache key)
        -> ClientCache     (stored result for an identical request?)
        -> SyncClient      (HTTP GET, timeouts, classification)
        -> dict | DistanceMatrixError

Typical use::

    api = DistanceMatrixAPI(Configuration(google_api_key="secret", mode="walking"))
    data = api.data(["Oslo S"], [(59.92, 10.75), "Aker Brygge"])
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from distmatrix.cache import ClientCache
from distmatrix.client import SyncClient
from distmatrix.instrumentation import Instrumenter, LogSubscriber
from distmatrix.models import Configuration, RequestDescriptor
from distmatrix.url_builder import UrlBuilder


class DistanceMatrixAPI:
    """Fetch distance matrix data for one configuration.

    The cache store and logger are taken from *configuration* when this
    object is created. Safe to share across threads as long as the
    configuration object itself is not mutated concurrently.

    Args:
        configuration: Request options, credentials, and collaborators.
        client: Transport client; one is created from *instrumenters* if
            omitted.
        instrumenters: Extra request observers. A
            :class:`~distmatrix.instrumentation.LogSubscriber` is added
            automatically when ``configuration.logger`` is set.
    """

    def __init__(
        self,
        configuration: Optional[Configuration] = None,
        client: Optional[SyncClient] = None,
        instrumenters: Optional[list[Instrumenter]] = None,
    ) -> None:
        self._configuration = configuration or Configuration()
        observers: list[Instrumenter] = list(instrumenters or [])
        if self._configuration.logger is not None:
            observers.append(LogSubscriber(self._configuration.logger))
        self._client = client or SyncClient(instrumenters=observers)
        self._facade = ClientCache(self._client, self._configuration.cache)

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def request(self, origins: Iterable[Any], destinations: Iterable[Any]) -> RequestDescriptor:
        """Build the request without sending it."""
        return UrlBuilder(self._configuration).build(origins, destinations)

    def data(
        self,
        origins: Iterable[Any],
        destinations: Iterable[Any],
        instrumentation: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Return the decoded response for *origins* x *destinations*.

        Args:
            origins: Places to travel from.
            destinations: Places to travel to.
            instrumentation: Extra fields for the request event. An
                ``elements`` count is added unless the caller sets one.

        Raises:
            InvalidConfigurationError: Invalid options; nothing was sent.
            InvalidRequestError: Empty or malformed places; nothing was sent.
            RequestTooLargeError: URL too long (locally or per HTTP 414).
            ClientError: The service rejected the request.
            ServerError: Upstream or transport failure; retry later.
        """
        builder = UrlBuilder(self._configuration)
        descriptor = builder.build(origins, destinations)
        payload = {"elements": descriptor.elements, **(instrumentation or {})}
        return self._facade.get(
            descriptor,
            instrumentation=payload,
            configuration=builder.configuration,
        )


def get_matrix_data(
    origins: Iterable[Any],
    destinations: Iterable[Any],
    configuration: Optional[Configuration] = None,
    **options: Any,
) -> dict[str, Any]:
    """One-off convenience wrapper around :meth:`DistanceMatrixAPI.data`.

    Keyword *options* are applied to a copy of *configuration* (or to a
    fresh one), e.g. ``get_matrix_data(a, b, mode="walking", google_api_key=k)``.
    """
    unknown = sorted(set(options) - set(Configuration.model_fields))
    if unknown:
        raise TypeError(f"Unknown configuration options: {', '.join(unknown)}")
    config = (configuration or Configuration()).model_copy(update=options)
    return DistanceMatrixAPI(config).data(origins, destinations)
