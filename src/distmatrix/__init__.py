"""distmatrix -- a client for the Google Distance Matrix API.

Turns origins, destinations, and request options into a canonical,
size-bounded request, sends it with bounded timeouts, and classifies the
answer into parsed data or a typed error. Identical requests can be served
from a cache with at most one fetch per request.

Example::

    from distmatrix import Configuration, DistanceMatrixAPI

    config = Configuration(google_api_key="...", mode="bicycling")
    data = DistanceMatrixAPI(config).data(["Oslo S"], [(59.9139, 10.7522)])

Modules:
    models: Configuration and request descriptor models.
    url_builder: Canonical URL, signing, size bound, cache key.
    client: HTTP transport and response classification.
    cache: Cache facade and stores.
    api: The end-to-end pipeline.
    exceptions: Error taxonomy with CLI exit codes.
    app: Typer CLI.
"""

__version__ = "0.1.0"

from distmatrix.api import DistanceMatrixAPI, get_matrix_data  # noqa: E402
from distmatrix.exceptions import (  # noqa: E402
    ClientError,
    DistanceMatrixError,
    InvalidConfigurationError,
    InvalidRequestError,
    RequestTooLargeError,
    ServerError,
    UpstreamStatusError,
)
from distmatrix.models import Configuration, FieldError, RequestDescriptor  # noqa: E402

__all__ = [
    "ClientError",
    "Configuration",
    "DistanceMatrixAPI",
    "DistanceMatrixError",
    "FieldError",
    "InvalidConfigurationError",
    "InvalidRequestError",
    "RequestDescriptor",
    "RequestTooLargeError",
    "ServerError",
    "UpstreamStatusError",
    "get_matrix_data",
]
