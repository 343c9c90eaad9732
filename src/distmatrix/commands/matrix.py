"""The ``distmatrix matrix`` command -- fetch a distance matrix.

Origins and destinations are given as repeated ``-O`` / ``-D`` options.
A value that looks like ``lat,lng`` is sent as a coordinate pair (rounded
to ``lat_lng_scale`` and eligible for polyline encoding); anything else is
sent as an address.

Request options default to the ``defaults`` section of the global config
and can be overridden per call. Credentials come from the environment or
the configured credential sources (see :mod:`distmatrix.config`).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import typer

from distmatrix.exceptions import DistanceMatrixError, InvalidConfigurationError
from distmatrix.output import error, info

_COORDINATE_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


def parse_place(value: str) -> Any:
    """Return ``(lat, lng)`` for ``"59.91,10.75"``-style input, else the string itself."""
    match = _COORDINATE_RE.match(value)
    if match:
        return float(match.group(1)), float(match.group(2))
    return value


def matrix_command(
    origin: list[str] = typer.Option(..., "--origin", "-O", help="Origin address or 'lat,lng'. Repeatable."),
    destination: list[str] = typer.Option(
        ..., "--destination", "-D", help="Destination address or 'lat,lng'. Repeatable."
    ),
    mode: Optional[str] = typer.Option(None, "--mode", help="driving, walking, bicycling, transit."),
    avoid: Optional[str] = typer.Option(None, "--avoid", help="tolls, highways, ferries, indoor."),
    units: Optional[str] = typer.Option(None, "--units", help="metric or imperial."),
    language: Optional[str] = typer.Option(None, "--language", help="Result language, e.g. 'nb'."),
    departure_time: Optional[str] = typer.Option(
        None, "--departure-time", help="Unix timestamp or 'now'."
    ),
    arrival_time: Optional[str] = typer.Option(None, "--arrival-time", help="Unix timestamp."),
    transit_mode: Optional[str] = typer.Option(None, "--transit-mode", help="bus, subway, train, tram, rail."),
    transit_routing_preference: Optional[str] = typer.Option(
        None, "--transit-routing-preference", help="less_walking or fewer_transfers."
    ),
    traffic_model: Optional[str] = typer.Option(
        None, "--traffic-model", help="best_guess, pessimistic, optimistic."
    ),
    encoded_polylines: bool = typer.Option(
        False, "--encoded-polylines", help="Send coordinates as encoded polylines."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the response cache."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print the request URL without sending it."),
) -> None:
    """Fetch travel distance and time between origins and destinations.

    Example::

        distmatrix matrix -O "Oslo S" -D "59.91,10.73" --mode walking
        distmatrix --json matrix -O Bergen -D Stavanger --departure-time now
    """
    from distmatrix.api import DistanceMatrixAPI
    from distmatrix.cache import DiskCache
    from distmatrix.client.response import format_matrix_response
    from distmatrix.config import build_configuration, get_cache_dir, load_global_config
    from distmatrix.url_builder import filter_sensitive

    overrides = {
        "mode": mode,
        "avoid": avoid,
        "units": units,
        "language": language,
        "departure_time": departure_time,
        "arrival_time": arrival_time,
        "transit_mode": transit_mode,
        "transit_routing_preference": transit_routing_preference,
        "traffic_model": traffic_model,
        "use_encoded_polylines": True if encoded_polylines else None,
    }
    origins = [parse_place(o) for o in origin]
    destinations = [parse_place(d) for d in destination]

    cache: Optional[DiskCache] = None
    try:
        settings = load_global_config()
        configuration = build_configuration(overrides, settings)
        configuration.logger = logging.getLogger("distmatrix.requests")
        if settings.cache.enabled and not no_cache and not dry_run:
            cache = DiskCache(get_cache_dir(), settings.cache)
            configuration.cache = cache

        api = DistanceMatrixAPI(configuration)
        if dry_run:
            descriptor = api.request(origins, destinations)
            info(f"[dry-run] {descriptor.elements} elements, {len(descriptor.url)} characters")
            typer.echo(filter_sensitive(descriptor.url))
            return

        data = api.data(origins, destinations)
        format_matrix_response(data)
    except InvalidConfigurationError as exc:
        for field_error in exc.errors:
            error(f"{field_error.field}: {field_error.message}")
        raise typer.Exit(code=exc.exit_code) from None
    except DistanceMatrixError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    finally:
        if cache is not None:
            cache.close()
