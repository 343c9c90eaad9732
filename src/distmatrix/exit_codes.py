"""Numeric process exit codes for the ``distmatrix`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~distmatrix.exceptions.DistanceMatrixError` subclass.
Shell wrappers can inspect the exit code to tell a rejected request from a
transient upstream failure without parsing stderr.

Example::

    $ distmatrix matrix -O Oslo -D Bergen
    $ echo $?
    5   # EXIT_SERVER_ERROR -- safe to retry later
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid request options or missing origins / destinations."""

EXIT_CLIENT_ERROR = 3
"""The upstream service rejected the request (4xx or embedded error status)."""

EXIT_SERVER_ERROR = 5
"""Upstream or transport failure (5xx, unknown status, timeout)."""

EXIT_REQUEST_TOO_LARGE = 7
"""The request URL exceeds the maximum size accepted by the service."""
