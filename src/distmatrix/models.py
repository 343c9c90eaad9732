"""Canonical Pydantic models shared across all distmatrix modules.

The models fall into two groups:

**Request models** -- built in memory for every call:
    :class:`Configuration`, :class:`FieldError`, and
    :class:`RequestDescriptor`.

**Settings models** -- serialised as JSON in the user's config directory
and turned into a :class:`Configuration` by
:func:`~distmatrix.config.build_configuration`:
    :class:`RequestDefaults`, :class:`CacheConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

:class:`Configuration` is deliberately permissive on assignment: any value
can be stored, and :meth:`Configuration.errors` reports which ones the
upstream service would reject. This lets callers inspect every failure at
once before a request is attempted.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated, Any, Callable, Literal, Optional, Union, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    ValidationError,
)

from distmatrix.exceptions import InvalidConfigurationError


# --- Enumerations accepted by the service ---

Mode = Literal["driving", "walking", "bicycling", "transit"]
Avoid = Literal["tolls", "highways", "ferries", "indoor"]
Units = Literal["metric", "imperial"]
Protocol = Literal["http", "https"]
TransitMode = Literal["bus", "subway", "train", "tram", "rail"]
TransitRoutingPreference = Literal["less_walking", "fewer_transfers"]
TrafficModel = Literal["best_guess", "pessimistic", "optimistic"]

Timeout = Annotated[float, Field(gt=0, allow_inf_nan=False)]
"""A finite number of seconds greater than zero."""

ATTRIBUTES: tuple[str, ...] = (
    "mode",
    "avoid",
    "units",
    "language",
    "departure_time",
    "arrival_time",
    "transit_mode",
    "transit_routing_preference",
    "traffic_model",
)
"""Options sent to the service as query parameters, in URL order."""

API_DEFAULTS: dict[str, str] = {
    "mode": "driving",
    "units": "metric",
    "traffic_model": "best_guess",
}
"""Values the service assumes when the parameter is omitted."""

INVALID_ENUM_VALUE = "InvalidEnumValue"
INVALID_TIME_VALUE = "InvalidTimeValue"
INVALID_TIMEOUT = "InvalidTimeout"


def sha512_hexdigest(value: str) -> str:
    """Default cache key transform: hex SHA-512 of *value*."""
    return hashlib.sha512(value.encode("utf-8")).hexdigest()


# --- Validation ---


class FieldError(BaseModel):
    """A single rejected :class:`Configuration` field.

    Attributes:
        field: Attribute name, e.g. ``"mode"``.
        reason: One of ``InvalidEnumValue``, ``InvalidTimeValue``,
            ``InvalidTimeout``.
        message: Human-readable explanation.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    reason: str
    message: str


class _ConfigurationRules(BaseModel):
    """Strict shadow of :class:`Configuration` used only for validation."""

    mode: Optional[Mode] = None
    avoid: Optional[Avoid] = None
    units: Optional[Units] = None
    protocol: Protocol = "https"
    departure_time: Optional[Union[NonNegativeInt, Literal["now"]]] = None
    arrival_time: Optional[NonNegativeInt] = None
    transit_mode: Optional[TransitMode] = None
    transit_routing_preference: Optional[TransitRoutingPreference] = None
    traffic_model: Optional[TrafficModel] = None
    http_open_timeout: Optional[Timeout] = None
    http_read_timeout: Optional[Timeout] = None
    http_ssl_timeout: Optional[Timeout] = None


_ENUMERATIONS: dict[str, tuple[str, ...]] = {
    "mode": get_args(Mode),
    "avoid": get_args(Avoid),
    "units": get_args(Units),
    "protocol": get_args(Protocol),
    "transit_mode": get_args(TransitMode),
    "transit_routing_preference": get_args(TransitRoutingPreference),
    "traffic_model": get_args(TrafficModel),
}

_TIME_FIELDS = ("departure_time", "arrival_time")
_TIMEOUT_FIELDS = ("http_open_timeout", "http_read_timeout", "http_ssl_timeout")


def _field_error(name: str, value: Any) -> FieldError:
    if name in _ENUMERATIONS:
        allowed = ", ".join(_ENUMERATIONS[name])
        return FieldError(
            field=name,
            reason=INVALID_ENUM_VALUE,
            message=f"{value!r} is not one of: {allowed}",
        )
    if name in _TIME_FIELDS:
        expected = "a unix timestamp or 'now'" if name == "departure_time" else "a unix timestamp"
        return FieldError(
            field=name,
            reason=INVALID_TIME_VALUE,
            message=f"{value!r} is not {expected}",
        )
    return FieldError(
        field=name,
        reason=INVALID_TIMEOUT,
        message=f"{value!r} is not a positive number of seconds",
    )


# --- Request models ---


class Configuration(BaseModel):
    """Options for a distance matrix request.

    Attributes may be assigned freely; nothing is checked until
    :meth:`errors` / :meth:`is_valid` is called. The
    :class:`~distmatrix.url_builder.UrlBuilder` refuses to build a request
    from an invalid configuration.

    Example::

        config = Configuration(mode="walking", google_api_key="secret")
        config.departure_time = "now"
        assert config.is_valid()
        config.to_param()
        # {'mode': 'walking', 'departure_time': 'now', 'key': 'secret'}
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    mode: Any = "driving"
    avoid: Any = None
    units: Any = "metric"
    protocol: Any = "https"
    language: Any = None
    departure_time: Any = Field(default=None, description="Unix timestamp or 'now'")
    arrival_time: Any = Field(default=None, description="Unix timestamp")
    transit_mode: Any = None
    transit_routing_preference: Any = None
    traffic_model: Any = "best_guess"

    http_open_timeout: Any = Field(default=None, description="Connect timeout in seconds")
    http_read_timeout: Any = Field(default=None, description="Read timeout in seconds")
    http_ssl_timeout: Any = Field(default=None, description="TLS handshake timeout in seconds")

    google_business_api_client_id: Optional[str] = None
    google_business_api_private_key: Optional[str] = None
    google_api_key: Optional[str] = None

    lat_lng_scale: int = 5
    use_encoded_polylines: bool = False

    cache_key_transform: Callable[[str], str] = Field(default=sha512_hexdigest)
    logger: Optional[logging.Logger] = None
    cache: Optional[Any] = Field(
        default=None, description="Cache collaborator exposing get(key) and set(key, value)"
    )

    def __getitem__(self, name: str) -> Any:
        if name not in type(self).model_fields:
            raise KeyError(name)
        return getattr(self, name)

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in type(self).model_fields:
            raise KeyError(name)
        setattr(self, name, value)

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def errors(self) -> list[FieldError]:
        """Return one :class:`FieldError` per field the service would reject."""
        data = {name: getattr(self, name) for name in _ConfigurationRules.model_fields}
        try:
            _ConfigurationRules.model_validate(data)
        except ValidationError as exc:
            # Union fields report one entry per member; keep the first per field.
            found: dict[str, FieldError] = {}
            for err in exc.errors():
                name = str(err["loc"][0])
                if name not in found:
                    found[name] = _field_error(name, data[name])
            return list(found.values())
        return []

    def is_valid(self) -> bool:
        """Return ``True`` when :meth:`errors` is empty."""
        return not self.errors()

    def validate_or_raise(self) -> None:
        """Raise :class:`~distmatrix.exceptions.InvalidConfigurationError` if invalid."""
        errors = self.errors()
        if errors:
            raise InvalidConfigurationError(errors)

    # ------------------------------------------------------------------ #
    # Serialisation
    # ------------------------------------------------------------------ #

    def to_param(self) -> dict[str, Any]:
        """Return the query parameters this configuration contributes.

        Unset and blank options are left out, as are options equal to the
        service's own default. Credentials become ``client`` and ``key``.
        """
        params: dict[str, Any] = {}
        for name in ATTRIBUTES:
            value = getattr(self, name)
            if _is_blank(value) or API_DEFAULTS.get(name) == value:
                continue
            params[name] = value

        if not _is_blank(self.google_business_api_client_id):
            params["client"] = self.google_business_api_client_id
        if not _is_blank(self.google_api_key):
            params["key"] = self.google_api_key
        return params

    def signs_urls(self) -> bool:
        """Whether requests are signed with the business (client id + private key) scheme."""
        return not _is_blank(self.google_business_api_client_id) and not _is_blank(
            self.google_business_api_private_key
        )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RequestDescriptor(BaseModel):
    """A canonical, ready-to-send request.

    Built by :class:`~distmatrix.url_builder.UrlBuilder`, consumed by the
    client and the cache facade, and discarded after the call.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    cache_key: str
    elements: int = Field(default=0, description="origins x destinations")


# --- Settings models ---


class RequestDefaults(BaseModel):
    """Request options persisted in :class:`GlobalConfig`.

    ``None`` means "leave the :class:`Configuration` default alone".
    """

    mode: Optional[str] = None
    avoid: Optional[str] = None
    units: Optional[str] = None
    protocol: Optional[str] = None
    language: Optional[str] = None
    transit_mode: Optional[str] = None
    transit_routing_preference: Optional[str] = None
    traffic_model: Optional[str] = None
    http_open_timeout: Optional[float] = None
    http_read_timeout: Optional[float] = None
    http_ssl_timeout: Optional[float] = None
    lat_lng_scale: Optional[int] = None
    use_encoded_polylines: Optional[bool] = None


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable response caching")
    ttl_seconds: int = Field(default=3600, description="Cache TTL in seconds")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide settings persisted at ``~/.config/distmatrix/config.json``.

    Credential sources use the formats understood by
    :func:`~distmatrix.config.resolve_credential` (``env:VAR`` or
    ``file:/path``). Environment variables override them; see
    :func:`~distmatrix.config.build_configuration`.
    """

    api_key_source: Optional[str] = None
    client_id_source: Optional[str] = None
    private_key_source: Optional[str] = None
    defaults: RequestDefaults = Field(default_factory=RequestDefaults)
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
