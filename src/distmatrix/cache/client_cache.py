"""Cache facade in front of :class:`~distmatrix.client.SyncClient`.

:class:`ClientCache` returns a stored result for a request it has seen
before and otherwise fetches through the client. Only successful results
are stored: an exception propagates to the caller and leaves the cache
untouched, so a transient failure is retried on the next identical call.

Concurrent callers asking for the same key are serialised on a per-key
lock; the first one fetches, the rest find the stored result once they
get the lock. Callers with different keys never wait on each other.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from distmatrix.cache.cache import CacheStore
from distmatrix.client import SyncClient
from distmatrix.models import Configuration, RequestDescriptor

logger = logging.getLogger(__name__)


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class ClientCache:
    """Serve identical requests from *cache*, fetching at most once per key.

    Args:
        client: The client used on a cache miss.
        cache: The store; ``None`` makes every call a pass-through.
    """

    def __init__(self, client: SyncClient, cache: Optional[CacheStore] = None) -> None:
        self._client = client
        self._cache = cache
        self._locks: dict[str, _KeyLock] = {}
        self._guard = threading.Lock()

    def get(
        self,
        descriptor: RequestDescriptor,
        instrumentation: Optional[dict[str, Any]] = None,
        configuration: Optional[Configuration] = None,
    ) -> dict[str, Any]:
        """Return the response body for *descriptor*, from the cache when possible."""
        return self.fetch(
            descriptor.cache_key,
            lambda: self._client.get(
                descriptor,
                instrumentation=instrumentation,
                configuration=configuration,
            ),
        )

    def fetch(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the value stored under *key*, or compute, store, and return it."""
        if self._cache is None:
            return compute()

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key[:16])
            return cached

        entry = self._acquire(key)
        try:
            with entry.lock:
                cached = self._cache.get(key)
                if cached is not None:
                    logger.debug("Cache hit for %s after wait", key[:16])
                    return cached

                logger.debug("Cache miss for %s", key[:16])
                value = compute()
                self._cache.set(key, value)
                return value
        finally:
            self._release(key, entry)

    def _acquire(self, key: str) -> _KeyLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.holders += 1
            return entry

    def _release(self, key: str, entry: _KeyLock) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(key, None)
