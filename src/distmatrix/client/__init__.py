"""HTTP client module for distmatrix.

Provides :class:`SyncClient`, the transport layer that sends a
:class:`~distmatrix.models.RequestDescriptor` with :mod:`httpx` and
classifies the response into parsed data or a typed exception, and the
presentation helpers in :mod:`distmatrix.client.response` used by the CLI.

Example::

    from distmatrix.client import SyncClient

    data = SyncClient().get(descriptor, configuration=config)
"""

from distmatrix.client.sync_client import CLIENT_ERRORS, DEFAULT_TIMEOUT, SyncClient, build_timeout

__all__ = ["SyncClient", "CLIENT_ERRORS", "DEFAULT_TIMEOUT", "build_timeout"]
