"""Response caching for distmatrix.

This package provides:

* :class:`ClientCache` -- the facade that serves a stored result for an
  identical request or fetches it once through the client.
* :class:`DiskCache` -- a :mod:`diskcache` backed store with a TTL, used by
  the CLI and controlled by :class:`~distmatrix.models.CacheConfig`.
* :class:`MemoryCache` -- an in-process store for long-running services.

Any object with ``get(key)`` and ``set(key, value)`` can act as the store
(see :class:`CacheStore`).
"""

from distmatrix.cache.cache import CacheStore, DiskCache, MemoryCache
from distmatrix.cache.client_cache import ClientCache

__all__ = ["CacheStore", "ClientCache", "DiskCache", "MemoryCache"]
