"""Exception hierarchy for staticcache.

All exceptions inherit from :class:`StaticCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`staticcache.exit_codes`.
The library raises these to the caller of ``store``/``serve``; the CLI entry
point in :func:`staticcache.app.main` catches ``StaticCacheError`` and exits
with the matching code.

Subclass hierarchy::

    StaticCacheError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- CacheStorageError        (exit 3)
    +-- CacheServeError          (exit 4)
    |   +-- ArtifactUnavailableError
    |       +-- ArtifactNotFoundError
    |       +-- ArtifactUnreadableError
    +-- OriginError              (exit 6)
    +-- ConfigError              (exit 1)

Best-effort disk cleanup during lazy expiry and sweeps never raises; those
failures are only logged.
"""

from staticcache.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_ORIGIN_ERROR,
    EXIT_SERVE_ERROR,
    EXIT_STORAGE_ERROR,
)


class StaticCacheError(Exception):
    """Base exception for all staticcache errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(StaticCacheError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class CacheStorageError(StaticCacheError):
    """Raised when the cache directory cannot be created or an artifact cannot be written.

    The index is never updated when this is raised, so no entry points at a
    missing or partially written file.
    """

    exit_code = EXIT_STORAGE_ERROR


class CacheServeError(StaticCacheError):
    """Raised when a cached artifact cannot be streamed to the response sink.

    Callers are expected to fall back to fetching fresh content from the
    origin.
    """

    exit_code = EXIT_SERVE_ERROR


class ArtifactUnavailableError(CacheServeError):
    """Raised when an artifact cannot be opened, before anything is written to the sink.

    Safe to recover from by fetching the origin instead.
    """


class ArtifactNotFoundError(ArtifactUnavailableError):
    """Raised when an index entry's artifact file no longer exists on disk."""


class ArtifactUnreadableError(ArtifactUnavailableError):
    """Raised when an artifact exists but cannot be opened (permissions, not a file)."""


class OriginError(StaticCacheError):
    """Raised on network-level failures while fetching from the origin."""

    exit_code = EXIT_ORIGIN_ERROR


class ConfigError(StaticCacheError):
    """Raised for configuration problems (unreadable or invalid config files)."""

    exit_code = EXIT_GENERIC_FAILURE
