"""Turns a :class:`~distmatrix.models.Configuration` and a set of places into a request.

The URL is the canonical form of a request: query parameters always appear
in the same order (configuration options, then ``origins``, then
``destinations``, then ``signature``), so two equal requests produce the
same string and therefore the same cache key.

Oversized URLs are rejected here, before any network traffic, with
:class:`~distmatrix.exceptions.RequestTooLargeError`.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote, urlsplit

from distmatrix.exceptions import InvalidRequestError, RequestTooLargeError
from distmatrix.models import Configuration, RequestDescriptor
from distmatrix.places import Place, places_to_param, unique_places

BASE_URL = "maps.googleapis.com/maps/api/distancematrix/json"
MAX_URL_SIZE = 8192
"""Longest URL the service accepts."""

SENSITIVE_PARAMS = ("key", "client", "signature")

_SENSITIVE_RE = re.compile(r"([?&](?:%s)=)[^&]*" % "|".join(SENSITIVE_PARAMS))


class UrlBuilder:
    """Builds :class:`~distmatrix.models.RequestDescriptor` objects.

    The configuration is copied on construction; later changes to the
    caller's object do not affect requests built by this instance.

    Args:
        configuration: Request options. Validated on every :meth:`build`.

    Example::

        builder = UrlBuilder(Configuration(google_api_key="secret"))
        descriptor = builder.build(["Oslo"], [(60.39299, 5.32415)])
        descriptor.url
        # 'https://maps.googleapis.com/maps/api/distancematrix/json?key=secret&...'
    """

    def __init__(self, configuration: Configuration) -> None:
        self._configuration = configuration.model_copy()

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def build(self, origins: Iterable[Any], destinations: Iterable[Any]) -> RequestDescriptor:
        """Build the request for *origins* x *destinations*.

        Raises:
            InvalidConfigurationError: If the configuration is not valid.
            InvalidRequestError: If origins or destinations are empty or
                contain something that is not a place.
            RequestTooLargeError: If the URL exceeds :data:`MAX_URL_SIZE`.
        """
        config = self._configuration
        config.validate_or_raise()

        origin_places = unique_places(origins)
        destination_places = unique_places(destinations)
        if not origin_places:
            raise InvalidRequestError("At least one origin is required")
        if not destination_places:
            raise InvalidRequestError("At least one destination is required")

        url = self._build_url(origin_places, destination_places)
        if len(url) > MAX_URL_SIZE:
            raise RequestTooLargeError(url, MAX_URL_SIZE)

        return RequestDescriptor(
            url=url,
            cache_key=config.cache_key_transform(url),
            elements=len(origin_places) * len(destination_places),
        )

    def _build_url(self, origins: list[Place], destinations: list[Place]) -> str:
        config = self._configuration
        params = self.params(origins, destinations)
        query = "&".join(f"{name}={_escape(value)}" for name, value in params.items())
        url = f"{config.protocol}://{BASE_URL}?{query}"
        if config.signs_urls():
            url = sign_url(url, config.google_business_api_private_key or "")
        return url

    def params(self, origins: list[Place], destinations: list[Place]) -> dict[str, Any]:
        """Return the ordered query parameters, before escaping."""
        config = self._configuration
        params = config.to_param()
        params["origins"] = places_to_param(
            origins, config.lat_lng_scale, config.use_encoded_polylines
        )
        params["destinations"] = places_to_param(
            destinations, config.lat_lng_scale, config.use_encoded_polylines
        )
        return params


def _escape(value: Any) -> str:
    return quote(str(value), safe=",:")


def sign_url(url: str, private_key: str) -> str:
    """Append the business-scheme ``signature`` parameter to *url*.

    The signature is an HMAC-SHA1 of the path and query, keyed with the
    urlsafe-base64 decoded private key, itself urlsafe-base64 encoded.

    Raises:
        InvalidRequestError: If *private_key* is not urlsafe base64.
    """
    parts = urlsplit(url)
    padded = private_key + "=" * (-len(private_key) % 4)
    try:
        key = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError, ValueError):
        raise InvalidRequestError(
            "google_business_api_private_key is not valid urlsafe base64"
        ) from None
    digest = hmac.new(key, f"{parts.path}?{parts.query}".encode("utf-8"), hashlib.sha1).digest()
    signature = base64.urlsafe_b64encode(digest).decode("ascii")
    return f"{url}&signature={signature}"


def filter_sensitive(url: str) -> str:
    """Replace credential query values in *url* with ``[FILTERED]`` for display."""
    return _SENSITIVE_RE.sub(r"\1[FILTERED]", url)
