"""Shared test fixtures for distmatrix.

Provides isolated settings directories, output and logging state resets,
a mock-transport factory for the HTTP layer, and a CLI runner. Fixtures
are discovered automatically by pytest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from distmatrix.output import OutputFormat, OutputManager, reset_output, set_output


OK_BODY: dict[str, Any] = {
    "destination_addresses": ["Bergen, Norway"],
    "origin_addresses": ["Oslo, Norway"],
    "rows": [
        {
            "elements": [
                {
                    "distance": {"text": "463 km", "value": 463123},
                    "duration": {"text": "6 hours 50 mins", "value": 24600},
                    "status": "OK",
                }
            ]
        }
    ],
    "status": "OK",
}


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches sys.stdout/sys.stderr at creation time; once a
    CliRunner invocation finishes those streams are closed.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _restore_package_logger() -> None:
    """Undo handlers installed by the CLI callback so caplog keeps working."""
    package_logger = logging.getLogger("distmatrix")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def ok_body() -> dict[str, Any]:
    """A successful one-by-one distance matrix response body."""
    return {**OK_BODY}


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Factory for a RecordingTransport answering with a fixed status and body."""

    def _make(status_code: int = 200, json: Any = None, content: bytes | None = None) -> RecordingTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=OK_BODY if json is None else json)

        return RecordingTransport(handler)

    return _make


class EventRecorder:
    """Instrumenter that keeps every event."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def on_request(self, event: Any) -> None:
        self.events.append(event)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


# ---------------------------------------------------------------------------
# Settings isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate settings and cache directories to tmp_path.

    Sets XDG_CONFIG_HOME and XDG_CACHE_HOME under tmp_path, forces the XDG
    layout, and clears DISTMATRIX_* credentials from the environment.
    """
    monkeypatch.setattr("distmatrix.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    for var in ["DISTMATRIX_API_KEY", "DISTMATRIX_CLIENT_ID", "DISTMATRIX_PRIVATE_KEY"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain OutputManager for tests that ignore output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
