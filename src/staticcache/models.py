"""Canonical Pydantic models shared across all staticcache modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`StaticCacheConfig`, :class:`SweepConfig`, :class:`OriginConfig`,
    and the root :class:`GlobalConfig`.

**Index models** -- held in memory by :class:`~staticcache.cache.StaticCache`:
    :class:`CachedFile`.

All models use Pydantic v2. :class:`CachedFile` is frozen so that an entry
read from the index can never be observed half-updated; replacing a key
always swaps in a whole new instance.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = (
    ".html",
    ".css",
    ".js",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
)

DEFAULT_TIMEOUT_SECONDS = 3600
DEFAULT_MAX_FILE_SIZE = 25 * 1024 * 1024


# --- Cache config ---


class StaticCacheConfig(BaseModel):
    """Static cache settings for one proxy rule.

    A :class:`~staticcache.cache.CachePolicy` copies it on construction, so
    changing a config afterwards does not reach a cache already built from it.

    Example::

        StaticCacheConfig(
            enabled=True,
            timeout=300,
            file_extensions=[".css", ".js"],
            skip_subpaths=["/api/"],
            cache_file_dir="/var/cache/proxy/static",
        )
    """

    enabled: bool = Field(default=False, description="Enable static caching on this rule")
    timeout: int = Field(
        default=DEFAULT_TIMEOUT_SECONDS, description="How long to cache static files in seconds"
    )
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        description="Maximum file size to cache in bytes (<= 0 means unlimited)",
    )
    file_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS),
        description="File extensions to cache, e.g. ['.css', '.js', '.png']",
    )
    skip_subpaths: list[str] = Field(
        default_factory=list,
        description="Path substrings to never cache, e.g. ['/api/', '/admin/']",
    )
    cache_file_dir: str = Field(default="", description="Directory to store cached files")


def default_static_cache_config(cache_file_dir: str) -> StaticCacheConfig:
    """Return the default (disabled) static cache configuration bound to *cache_file_dir*."""
    return StaticCacheConfig(cache_file_dir=cache_file_dir)


class SweepConfig(BaseModel):
    """Schedule for the background expiry sweep."""

    enabled: bool = Field(default=True, description="Run periodic sweeps")
    interval_seconds: float = Field(default=300.0, gt=0, description="Seconds between sweeps")


class OriginConfig(BaseModel):
    """Upstream server the caching handler fetches misses from."""

    base_url: Optional[str] = Field(default=None, description="Origin base URL")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class GlobalConfig(BaseModel):
    """Root configuration persisted by :func:`~staticcache.config.save_global_config`."""

    cache: StaticCacheConfig = Field(default_factory=StaticCacheConfig)
    sweep: SweepConfig = Field(default_factory=SweepConfig)
    origin: OriginConfig = Field(default_factory=OriginConfig)


# --- Index entries ---


class CachedFile(BaseModel):
    """One cached artifact tracked by the in-memory index.

    Attributes:
        key: Normalised cache key (request path without its leading ``/``).
        artifact_path: Location of the stored body on disk. Owned by this
            entry alone.
        content_type: MIME type recorded at store time; may be empty, in
            which case it is inferred from ``artifact_path`` when serving.
        expiry_time: Unix timestamp after which the entry is stale.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    artifact_path: str
    content_type: str = ""
    expiry_time: float

    def is_expired(self, now: float) -> bool:
        """Return ``True`` if the entry is stale at *now*."""
        return now > self.expiry_time
