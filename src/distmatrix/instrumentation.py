"""Request instrumentation: one event per HTTP attempt.

This module provides:

* :class:`RequestEvent` -- a dataclass describing a single request
  attempt. The caller-supplied ``payload`` is carried through unchanged;
  timing, status code, and outcome are filled in by :func:`instrument`.
* :class:`Instrumenter` -- the protocol an observability sink implements.
* :class:`HookRunner` -- fans an event out to several instrumenters. A
  failing instrumenter is logged and skipped so that instrumentation can
  never break a request.
* :class:`LogSubscriber` -- writes one log line per request, with
  credentials filtered out of the URL.

:func:`instrument` wraps the network call in
:meth:`~distmatrix.client.SyncClient.get` and guarantees the event is
emitted exactly once, whether the attempt succeeds or raises.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from distmatrix.url_builder import filter_sensitive

logger = logging.getLogger(__name__)

EVENT_NAME = "client_request_matrix_data.distmatrix"

OUTCOME_PENDING = "pending"
OUTCOME_SUCCESS = "success"


@dataclass
class RequestEvent:
    """A single request attempt.

    Attributes:
        name: Event name, :data:`EVENT_NAME`.
        url: The request URL, unfiltered.
        payload: Caller-supplied fields, passed through as given.
        started_at: Wall-clock start time (``time.time()``).
        duration_ms: Elapsed time of the attempt in milliseconds.
        status_code: HTTP status, or ``None`` if no response arrived.
        outcome: ``"success"`` or the name of the raised exception class.
        error: The raised exception, if any.
    """

    name: str
    url: str
    payload: dict[str, Any] = field(default_factory=dict)
    started_at: float = 0.0
    duration_ms: float = 0.0
    status_code: Optional[int] = None
    outcome: str = OUTCOME_PENDING
    error: Optional[Exception] = None


class Instrumenter(Protocol):
    """Anything that wants to observe request events."""

    def on_request(self, event: RequestEvent) -> None: ...


class NullInstrumenter:
    """Instrumenter that ignores every event."""

    def on_request(self, event: RequestEvent) -> None:
        return None


class HookRunner:
    """Delivers each event to every instrumenter, in registration order."""

    def __init__(self, instrumenters: list[Instrumenter]) -> None:
        self._instrumenters = list(instrumenters)

    def on_request(self, event: RequestEvent) -> None:
        for instrumenter in self._instrumenters:
            try:
                instrumenter.on_request(event)
            except Exception:
                logger.exception("Instrumenter %r failed on %s", instrumenter, event.name)


class LogSubscriber:
    """Logs ``(12.3ms) (elements: 4) GET https://...`` for each request.

    The ``key``, ``client``, and ``signature`` query values are replaced by
    ``[FILTERED]``.

    Args:
        target: Logger to write to. Defaults to this module's logger.
        level: Level used for successful requests; failures use WARNING.
    """

    def __init__(self, target: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self._logger = target or logger
        self._level = level

    def on_request(self, event: RequestEvent) -> None:
        parts = [f"({event.duration_ms:.1f}ms)"]
        elements = event.payload.get("elements")
        if elements is not None:
            parts.append(f"(elements: {elements})")
        parts.append(f"GET {filter_sensitive(event.url)}")
        if event.error is None:
            self._logger.log(self._level, " ".join(parts))
        else:
            parts.append(f"failed: {event.outcome}")
            self._logger.warning(" ".join(parts))


@contextmanager
def instrument(
    instrumenter: Instrumenter,
    url: str,
    payload: Optional[dict[str, Any]] = None,
) -> Iterator[RequestEvent]:
    """Time the enclosed block and emit exactly one :class:`RequestEvent`.

    The block may set ``event.status_code``. Exceptions raised inside the
    block are recorded on the event and re-raised.
    """
    event = RequestEvent(
        name=EVENT_NAME,
        url=url,
        payload=dict(payload or {}),
        started_at=time.time(),
    )
    start = time.perf_counter()
    try:
        yield event
    except Exception as exc:
        event.outcome = type(exc).__name__
        event.error = exc
        raise
    else:
        event.outcome = OUTCOME_SUCCESS
    finally:
        event.duration_ms = (time.perf_counter() - start) * 1000
        instrumenter.on_request(event)
