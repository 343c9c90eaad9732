"""Tests for distmatrix.models.Configuration -- validation, defaults, to_param."""

from __future__ import annotations

import math
import time

import pytest

from distmatrix.exceptions import InvalidConfigurationError
from distmatrix.models import (
    API_DEFAULTS,
    ATTRIBUTES,
    INVALID_ENUM_VALUE,
    INVALID_TIME_VALUE,
    INVALID_TIMEOUT,
    Configuration,
)


def _errors_for(config: Configuration, field: str) -> list:
    return [e for e in config.errors() if e.field == field]


@pytest.fixture
def config() -> Configuration:
    return Configuration()


# ---------------------------------------------------------------------------
# Enumerated fields
# ---------------------------------------------------------------------------


ENUMERATIONS = {
    "mode": ["driving", "walking", "bicycling", "transit"],
    "avoid": ["tolls", "highways", "ferries", "indoor"],
    "units": ["metric", "imperial"],
    "protocol": ["http", "https"],
    "transit_mode": ["bus", "subway", "train", "tram", "rail"],
    "transit_routing_preference": ["less_walking", "fewer_transfers"],
    "traffic_model": ["best_guess", "pessimistic", "optimistic"],
}


class TestEnumeratedFields:
    @pytest.mark.parametrize(
        "field,value",
        [(field, value) for field, values in ENUMERATIONS.items() for value in values],
    )
    def test_member_is_valid(self, config: Configuration, field: str, value: str) -> None:
        config[field] = value
        assert _errors_for(config, field) == []

    @pytest.mark.parametrize("field", list(ENUMERATIONS))
    def test_outside_value_yields_exactly_one_error(self, config: Configuration, field: str) -> None:
        config[field] = "foo"
        errors = _errors_for(config, field)
        assert len(errors) == 1
        assert errors[0].reason == INVALID_ENUM_VALUE
        assert "'foo'" in errors[0].message

    @pytest.mark.parametrize(
        "field", [f for f in ENUMERATIONS if f != "protocol"]
    )
    def test_unset_is_valid(self, config: Configuration, field: str) -> None:
        config[field] = None
        assert _errors_for(config, field) == []

    def test_protocol_must_be_set(self, config: Configuration) -> None:
        config.protocol = None
        assert len(_errors_for(config, "protocol")) == 1

    def test_failures_coexist(self, config: Configuration) -> None:
        config.mode = "flying"
        config.units = "parsecs"
        config.arrival_time = "later"
        fields = sorted(e.field for e in config.errors())
        assert fields == ["arrival_time", "mode", "units"]
        assert not config.is_valid()


# ---------------------------------------------------------------------------
# Time fields
# ---------------------------------------------------------------------------


class TestDepartureTime:
    def test_valid_with_timestamp(self, config: Configuration) -> None:
        config.departure_time = int(time.time())
        assert _errors_for(config, "departure_time") == []

    def test_valid_with_zero(self, config: Configuration) -> None:
        config.departure_time = 0
        assert _errors_for(config, "departure_time") == []

    def test_valid_with_now(self, config: Configuration) -> None:
        config.departure_time = "now"
        assert _errors_for(config, "departure_time") == []

    @pytest.mark.parametrize("value", ["123now", "foo", "Now", -5])
    def test_invalid_values(self, config: Configuration, value: object) -> None:
        config.departure_time = value
        errors = _errors_for(config, "departure_time")
        assert len(errors) == 1
        assert errors[0].reason == INVALID_TIME_VALUE


class TestArrivalTime:
    def test_valid_with_timestamp(self, config: Configuration) -> None:
        config.arrival_time = int(time.time())
        assert _errors_for(config, "arrival_time") == []

    @pytest.mark.parametrize("value", ["foo", "now"])
    def test_invalid_values(self, config: Configuration, value: str) -> None:
        config.arrival_time = value
        errors = _errors_for(config, "arrival_time")
        assert len(errors) == 1
        assert errors[0].reason == INVALID_TIME_VALUE


# ---------------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------------


TIMEOUT_FIELDS = ["http_open_timeout", "http_read_timeout", "http_ssl_timeout"]


class TestTimeouts:
    @pytest.mark.parametrize("field", TIMEOUT_FIELDS)
    @pytest.mark.parametrize("value", [1, 0.5, 30])
    def test_valid_with_positive_number(self, config: Configuration, field: str, value: float) -> None:
        config[field] = value
        assert _errors_for(config, field) == []

    @pytest.mark.parametrize("field", TIMEOUT_FIELDS)
    def test_valid_when_unset(self, config: Configuration, field: str) -> None:
        config[field] = None
        assert _errors_for(config, field) == []

    @pytest.mark.parametrize("field", TIMEOUT_FIELDS)
    @pytest.mark.parametrize("value", [0, -1, "soon", math.inf, -math.inf, math.nan, "inf"])
    def test_invalid_values(self, config: Configuration, field: str, value: object) -> None:
        config[field] = value
        errors = _errors_for(config, field)
        assert len(errors) == 1
        assert errors[0].reason == INVALID_TIMEOUT


class TestValidateOrRaise:
    def test_valid_config_does_not_raise(self, config: Configuration) -> None:
        config.validate_or_raise()

    def test_invalid_config_raises_with_errors(self, config: Configuration) -> None:
        config.mode = "teleport"
        config.http_read_timeout = 0
        with pytest.raises(InvalidConfigurationError) as exc_info:
            config.validate_or_raise()
        assert {e.field for e in exc_info.value.errors} == {"mode", "http_read_timeout"}
        assert "mode" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_option_defaults(self, config: Configuration) -> None:
        assert config.mode == "driving"
        assert config.avoid is None
        assert config.units == "metric"
        assert config.protocol == "https"
        assert config.language is None
        assert config.traffic_model == "best_guess"
        assert config.transit_mode is None
        assert config.transit_routing_preference is None
        assert config.lat_lng_scale == 5
        assert config.use_encoded_polylines is False

    def test_time_and_timeout_defaults(self, config: Configuration) -> None:
        assert config.departure_time is None
        assert config.arrival_time is None
        assert config.http_open_timeout is None
        assert config.http_read_timeout is None
        assert config.http_ssl_timeout is None

    def test_credentials_and_collaborators_unset(self, config: Configuration) -> None:
        assert config.google_business_api_client_id is None
        assert config.google_business_api_private_key is None
        assert config.google_api_key is None
        assert config.logger is None
        assert config.cache is None

    def test_default_is_valid(self, config: Configuration) -> None:
        assert config.is_valid()

    def test_default_cache_key_transform(self, config: Configuration) -> None:
        key = config.cache_key_transform("foo")
        assert key == (
            "f7fbba6e0636f890e56fbbf3283e524c6fa3204ae298382d624741d0dc663832"
            "6e282c41be5e4254d8820772c5518a2c5a8c0c7f7eda19594a7eb539453e1ed7"
        )


# ---------------------------------------------------------------------------
# to_param
# ---------------------------------------------------------------------------


class TestToParam:
    @pytest.mark.parametrize("attr", ATTRIBUTES)
    def test_includes_attribute(self, config: Configuration, attr: str) -> None:
        config[attr] = "foo"
        assert config.to_param()[attr] == "foo"

    @pytest.mark.parametrize("attr", ATTRIBUTES)
    def test_excludes_unset_attribute(self, config: Configuration, attr: str) -> None:
        config[attr] = None
        assert attr not in config.to_param()

    @pytest.mark.parametrize("attr", ATTRIBUTES)
    def test_excludes_blank_attribute(self, config: Configuration, attr: str) -> None:
        config[attr] = "  "
        assert attr not in config.to_param()

    @pytest.mark.parametrize("attr,default", list(API_DEFAULTS.items()))
    def test_excludes_api_default(self, config: Configuration, attr: str, default: str) -> None:
        config[attr] = default
        assert attr not in config.to_param()

    def test_default_config_has_no_params(self, config: Configuration) -> None:
        assert config.to_param() == {}

    def test_includes_client(self, config: Configuration) -> None:
        config.google_business_api_client_id = "123"
        assert config.to_param()["client"] == "123"

    def test_includes_key(self, config: Configuration) -> None:
        config.google_api_key = "12345"
        assert config.to_param()["key"] == "12345"

    def test_private_key_never_serialised(self, config: Configuration) -> None:
        config.google_business_api_private_key = "secret"
        assert "secret" not in config.to_param().values()

    def test_zero_departure_time_is_kept(self, config: Configuration) -> None:
        config.departure_time = 0
        assert config.to_param()["departure_time"] == 0

    def test_idempotent(self, config: Configuration) -> None:
        config.mode = "walking"
        config.google_api_key = "k"
        assert config.to_param() == config.to_param()

    def test_to_param_does_not_validate(self, config: Configuration) -> None:
        config.mode = "teleport"
        assert config.to_param() == {"mode": "teleport"}


class TestItemAccess:
    def test_get_and_set_by_name(self, config: Configuration) -> None:
        config["mode"] = "walking"
        assert config["mode"] == "walking"
        assert config.mode == "walking"

    def test_unknown_name_raises_key_error(self, config: Configuration) -> None:
        with pytest.raises(KeyError):
            config["speed"] = 3
        with pytest.raises(KeyError):
            config["speed"]

    def test_assignment_never_raises(self, config: Configuration) -> None:
        config.mode = 42  # type: ignore[assignment]
        assert config.mode == 42
        assert len(_errors_for(config, "mode")) == 1

    @pytest.mark.parametrize(
        "field,value,reason",
        [
            ("mode", 1, INVALID_ENUM_VALUE),
            ("units", ["metric"], INVALID_ENUM_VALUE),
            ("protocol", 443, INVALID_ENUM_VALUE),
            ("departure_time", 1.5, INVALID_TIME_VALUE),
            ("arrival_time", "soon", INVALID_TIME_VALUE),
            ("http_read_timeout", math.inf, INVALID_TIMEOUT),
        ],
    )
    def test_construction_never_raises(self, field: str, value: object, reason: str) -> None:
        config = Configuration(**{field: value})
        assert config[field] == value
        errors = _errors_for(config, field)
        assert len(errors) == 1
        assert errors[0].reason == reason
        assert not config.is_valid()
