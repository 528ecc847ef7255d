"""Caching eligibility rules for a single proxy rule.

:class:`CachePolicy` answers the three questions the request handler asks
before touching the store: is caching switched on, is this request path
eligible, and is the body small enough. It holds no mutable state besides
the configuration it was built with.
"""

from __future__ import annotations

import logging
import os
import posixpath

from staticcache.models import StaticCacheConfig

logger = logging.getLogger(__name__)


class CachePolicy:
    """Pure decision logic over a :class:`~staticcache.models.StaticCacheConfig`.

    The policy keeps a deep copy of *config*, so edits to the caller's model
    after construction have no effect.

    Construction creates the configured storage directory if it is missing,
    so later store operations do not fail only because the base directory
    was never bootstrapped. A failure here is logged and left for
    :meth:`~staticcache.cache.StaticCache.store` to surface.

    Args:
        config: The static cache configuration for this rule.

    Example::

        policy = CachePolicy(StaticCacheConfig(enabled=True, file_extensions=[".css"]))
        policy.should_cache("/assets/app.css")   # True
        policy.should_cache("/assets/app")       # False
    """

    def __init__(self, config: StaticCacheConfig) -> None:
        self._config = config.model_copy(deep=True)
        self._extensions = frozenset(ext.lower() for ext in self._config.file_extensions)
        cache_dir = self._config.cache_file_dir
        if cache_dir:
            try:
                os.makedirs(cache_dir, exist_ok=True)
            except OSError as exc:
                logger.warning("Could not create cache directory %s: %s", cache_dir, exc)

    @property
    def config(self) -> StaticCacheConfig:
        """The policy's own snapshot of the configuration it was built with."""
        return self._config

    def is_enabled(self) -> bool:
        """Return ``True`` if static caching is switched on for this rule."""
        return self._config.enabled

    def fits_size_limit(self, content_length: int) -> bool:
        """Return ``True`` if a body of *content_length* bytes may be cached.

        A ``max_file_size`` of zero or less means there is no limit.
        """
        limit = self._config.max_file_size
        return limit <= 0 or content_length <= limit

    def should_cache(self, request_path: str) -> bool:
        """Decide whether *request_path* is eligible for caching.

        The path is rejected when caching is disabled or when any configured
        skip substring occurs anywhere in it. Otherwise it is accepted only
        if its extension matches an allowed extension, ignoring case on both
        sides. Paths without an extension never match.
        """
        if not self._config.enabled:
            return False

        if any(skip in request_path for skip in self._config.skip_subpaths):
            return False

        ext = _extension(request_path).lower()
        return bool(ext) and ext in self._extensions


def _extension(path: str) -> str:
    """Return the extension of the last path element, including the dot."""
    name = posixpath.basename(path)
    dot = name.rfind(".")
    if dot < 0:
        return ""
    return name[dot:]
