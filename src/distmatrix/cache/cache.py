"""Cache stores keyed by :attr:`~distmatrix.models.RequestDescriptor.cache_key`.

Both stores hold decoded response bodies. They never decide what is worth
caching; :class:`~distmatrix.cache.ClientCache` only hands them successful
results.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Optional, Protocol

import diskcache

from distmatrix.models import CacheConfig


class CacheStore(Protocol):
    """The collaborator interface expected by :class:`~distmatrix.cache.ClientCache`."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


class DiskCache:
    """Disk-backed store with a time-to-live.

    Entries live in a ``responses/`` directory under *cache_dir* and
    expire after :attr:`~distmatrix.models.CacheConfig.ttl_seconds`.
    A disabled config turns every call into a no-op.

    Args:
        cache_dir: Root directory for the cache.
        config: ``enabled`` flag and ``ttl_seconds``.

    Example::

        cache = DiskCache(get_cache_dir(), CacheConfig(ttl_seconds=600))
        cache.set(descriptor.cache_key, data)
        cache.get(descriptor.cache_key)
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            self._cache = diskcache.Cache(str(self._cache_dir / "responses"))

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or ``None`` on a miss or when disabled."""
        if self._cache is None:
            return None
        return self._cache.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* for ``ttl_seconds``."""
        if self._cache is None:
            return
        self._cache.set(key, value, expire=self._config.ttl_seconds)

    def delete(self, key: str) -> None:
        if self._cache is not None:
            self._cache.delete(key)

    def clear(self) -> None:
        """Remove all entries."""
        if self._cache is not None:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``enabled`` and, when enabled, ``size``, ``directory``, ``ttl_seconds``."""
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._cache_dir / "responses"),
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        if self._cache is not None:
            self._cache.close()


class MemoryCache:
    """Thread-safe in-process store without expiry."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
