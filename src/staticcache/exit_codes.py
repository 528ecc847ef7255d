"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~staticcache.exceptions.StaticCacheError` subclass.
Operator scripts can inspect the exit code to tell a storage problem from a
configuration problem without parsing stderr.

Example::

    $ staticcache orphans --purge
    $ echo $?
    3   # EXIT_STORAGE_ERROR -- an artifact could not be removed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_STORAGE_ERROR = 3
"""The cache directory could not be created or an artifact could not be written."""

EXIT_SERVE_ERROR = 4
"""A cached artifact was missing or unreadable when serving it."""

EXIT_ORIGIN_ERROR = 6
"""The origin server could not be reached (timeout, DNS failure, connection refused)."""
