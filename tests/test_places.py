"""Tests for place coercion and encoding."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from distmatrix.exceptions import InvalidRequestError
from distmatrix.places import (
    Place,
    encode_polyline,
    format_coordinate,
    places_to_param,
    unique_places,
)


class TestCoerce:
    def test_string_is_address(self) -> None:
        place = Place.coerce("Karl Johans gate 1, Oslo")
        assert place == Place(address="Karl Johans gate 1, Oslo")
        assert not place.is_coordinate

    def test_place_is_returned_unchanged(self) -> None:
        place = Place(lat=1.0, lng=2.0)
        assert Place.coerce(place) is place

    def test_tuple_is_coordinate(self) -> None:
        place = Place.coerce((59.91, 10.75))
        assert place == Place(lat=59.91, lng=10.75)
        assert place.is_coordinate

    def test_list_is_coordinate(self) -> None:
        assert Place.coerce([59.91, 10.75]) == Place(lat=59.91, lng=10.75)

    def test_mapping_with_lat_lng(self) -> None:
        assert Place.coerce({"lat": 1, "lng": 2}) == Place(lat=1.0, lng=2.0)

    def test_mapping_with_lon(self) -> None:
        assert Place.coerce({"lat": 1, "lon": 2}) == Place(lat=1.0, lng=2.0)

    def test_mapping_with_address(self) -> None:
        assert Place.coerce({"address": "Bergen"}) == Place(address="Bergen")

    def test_object_with_lat_lng_attributes(self) -> None:
        point = SimpleNamespace(lat=60.39, lng=5.32)
        assert Place.coerce(point) == Place(lat=60.39, lng=5.32)

    def test_numeric_strings_in_pair(self) -> None:
        assert Place.coerce(("59.5", "10.25")) == Place(lat=59.5, lng=10.25)

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_address_rejected(self, value: str) -> None:
        with pytest.raises(InvalidRequestError, match="blank"):
            Place.coerce(value)

    @pytest.mark.parametrize(
        "value",
        [42, None, (1, 2, 3), {"lat": "north", "lng": 1}, {"lng": 1}, object()],
    )
    def test_uninterpretable_values_rejected(self, value: object) -> None:
        with pytest.raises(InvalidRequestError):
            Place.coerce(value)


class TestFormatCoordinate:
    @pytest.mark.parametrize(
        "value,scale,expected",
        [
            (59.913868, 5, "59.91387"),
            (10.0, 5, "10"),
            (-0.5, 5, "-0.5"),
            (59.913868, 2, "59.91"),
            (59.913868, 0, "60"),
            (5.324150, 5, "5.32415"),
        ],
    )
    def test_rounding(self, value: float, scale: int, expected: str) -> None:
        assert format_coordinate(value, scale) == expected

    def test_place_to_param(self) -> None:
        assert Place(lat=59.913868, lng=10.752245).to_param(3) == "59.914,10.752"

    def test_address_to_param(self) -> None:
        assert Place(address="Oslo").to_param() == "Oslo"


class TestUniquePlaces:
    def test_drops_duplicates_keeping_first_order(self) -> None:
        places = unique_places(["Oslo", "Bergen", "Oslo", (1, 2), [1.0, 2.0]])
        assert places == [
            Place(address="Oslo"),
            Place(address="Bergen"),
            Place(lat=1.0, lng=2.0),
        ]

    def test_empty(self) -> None:
        assert unique_places([]) == []

    def test_accepts_generators(self) -> None:
        places = unique_places(name for name in ["a", "b"])
        assert [p.address for p in places] == ["a", "b"]


class TestPlacesToParam:
    def test_joined_with_pipe(self) -> None:
        assert places_to_param(["Oslo", (59.9, 10.75)]) == "Oslo|59.9,10.75"

    def test_uses_scale(self) -> None:
        assert places_to_param([(59.913868, 10.752245)], lat_lng_scale=2) == "59.91,10.75"

    def test_encoded_polyline_for_coordinates(self) -> None:
        points = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
        value = places_to_param(points, use_encoded_polylines=True)
        assert value == "enc:_p~iF~ps|U_ulLnnqC_mqNvxq`@:"

    def test_polylines_fall_back_when_an_address_is_present(self) -> None:
        value = places_to_param(["Oslo", (59.9, 10.75)], use_encoded_polylines=True)
        assert value == "Oslo|59.9,10.75"

    def test_polylines_disabled_by_default(self) -> None:
        assert places_to_param([(38.5, -120.2)]) == "38.5,-120.2"


class TestEncodePolyline:
    def test_reference_vector(self) -> None:
        points = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
        assert encode_polyline(points) == "_p~iF~ps|U_ulLnnqC_mqNvxq`@"

    def test_empty(self) -> None:
        assert encode_polyline([]) == ""

    def test_origin_point(self) -> None:
        assert encode_polyline([(0.0, 0.0)]) == "??"
