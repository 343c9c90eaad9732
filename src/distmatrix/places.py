"""Encoding of origins and destinations into query parameter values.

A place is either a free-form address (``"Karl Johans gate 1, Oslo"``) or a
coordinate pair. Callers may pass plain strings, ``(lat, lng)`` tuples,
mappings with ``lat`` / ``lng`` keys, or any object exposing ``lat`` and
``lng`` attributes; :meth:`Place.coerce` normalises them.

Places are joined with ``|``. Coordinates are rounded to the configured
``lat_lng_scale``. When encoded polylines are enabled and every place is a
coordinate pair, the whole list is sent as a single ``enc:<polyline>:``
value, which is considerably shorter for long lists.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from distmatrix.exceptions import InvalidRequestError

DELIMITER = "|"
POLYLINE_PRECISION = 5


@dataclass(frozen=True)
class Place:
    """An origin or destination: an address, or a latitude / longitude pair."""

    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def is_coordinate(self) -> bool:
        return self.lat is not None and self.lng is not None

    @classmethod
    def coerce(cls, value: Any) -> Place:
        """Build a :class:`Place` from any supported representation.

        Raises:
            InvalidRequestError: If *value* cannot be interpreted as a place.
        """
        if isinstance(value, Place):
            return value
        if isinstance(value, str):
            if not value.strip():
                raise InvalidRequestError("Place address must not be blank")
            return cls(address=value)
        if isinstance(value, Mapping):
            if "address" in value and value["address"]:
                return cls.coerce(str(value["address"]))
            lng = value.get("lng", value.get("lon"))
            return cls._from_pair(value.get("lat"), lng, value)
        if isinstance(value, Sequence) and len(value) == 2:
            return cls._from_pair(value[0], value[1], value)
        if hasattr(value, "lat") and hasattr(value, "lng"):
            return cls._from_pair(value.lat, value.lng, value)
        raise InvalidRequestError(f"Cannot interpret {value!r} as a place")

    @classmethod
    def _from_pair(cls, lat: Any, lng: Any, original: Any) -> Place:
        try:
            return cls(lat=float(lat), lng=float(lng))
        except (TypeError, ValueError):
            raise InvalidRequestError(
                f"Cannot interpret {original!r} as a place"
            ) from None

    def to_param(self, lat_lng_scale: int = 5) -> str:
        """Return the query value for this place alone."""
        if self.is_coordinate:
            return (
                f"{format_coordinate(self.lat, lat_lng_scale)},"
                f"{format_coordinate(self.lng, lat_lng_scale)}"
            )
        return self.address or ""


def format_coordinate(value: float, scale: int) -> str:
    """Round *value* to *scale* decimals without trailing zeros."""
    text = f"{float(value):.{max(scale, 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def unique_places(values: Iterable[Any]) -> list[Place]:
    """Coerce *values* into places, dropping duplicates but keeping order."""
    places: list[Place] = []
    seen: set[Place] = set()
    for value in values:
        place = Place.coerce(value)
        if place not in seen:
            seen.add(place)
            places.append(place)
    return places


def places_to_param(
    places: Iterable[Any],
    lat_lng_scale: int = 5,
    use_encoded_polylines: bool = False,
) -> str:
    """Encode *places* as a single query parameter value (not yet URL-escaped)."""
    items = [Place.coerce(p) for p in places]
    if use_encoded_polylines and items and all(p.is_coordinate for p in items):
        points = [(p.lat, p.lng) for p in items]
        return f"enc:{encode_polyline(points)}:"
    return DELIMITER.join(p.to_param(lat_lng_scale) for p in items)


# --- Polyline encoding ---


def encode_polyline(points: Iterable[tuple[float, float]], precision: int = POLYLINE_PRECISION) -> str:
    """Encode coordinate pairs with Google's encoded polyline algorithm."""
    factor = 10 ** precision
    chunks: list[str] = []
    prev_lat = prev_lng = 0
    for lat, lng in points:
        lat_i = int(round(lat * factor))
        lng_i = int(round(lng * factor))
        chunks.append(_encode_signed(lat_i - prev_lat))
        chunks.append(_encode_signed(lng_i - prev_lng))
        prev_lat, prev_lng = lat_i, lng_i
    return "".join(chunks)


def _encode_signed(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    out = []
    while value >= 0x20:
        out.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    out.append(chr(value + 63))
    return "".join(out)
