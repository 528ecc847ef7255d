"""Disk-backed store and in-memory index for static response bodies.

Each cached body lives in its own file under the configured cache
directory. A dict guarded by one lock maps the normalised request path to a
frozen :class:`~staticcache.models.CachedFile` describing that file. The
index and the files are created and destroyed together:

* :meth:`StaticCache.store` writes the body to a temp file outside the lock,
  then renames it into place and publishes the index entry under the lock.
* Lazy expiry in :meth:`StaticCache.lookup` and bulk expiry in
  :meth:`StaticCache.sweep` drop the entry and unlink its file under the
  lock, and only if the index still holds that exact entry.

Only renames and unlinks run inside the lock; body writes and reads do not.

The index is not persisted. A new :class:`StaticCache` starts empty even if
artifacts from an earlier process remain on disk; see
:meth:`StaticCache.orphaned_artifacts`.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import tempfile
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from staticcache.cache.policy import CachePolicy
from staticcache.cache.response import ResponseSink
from staticcache.exceptions import (
    ArtifactNotFoundError,
    ArtifactUnreadableError,
    CacheServeError,
    CacheStorageError,
)
from staticcache.models import CachedFile, StaticCacheConfig

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = "./cache"
BROWSER_CACHE_CONTROL = "public, max-age=3600"
_CHUNK_SIZE = 64 * 1024
_TMP_SUFFIX = ".tmp"


class StaticCache:
    """Cache of static response bodies for one proxy rule.

    One instance is shared by reference between every request handler
    serving the rule. All public methods are safe to call from multiple
    threads at once.

    Args:
        config: Static cache configuration. A :class:`CachePolicy` is built
            from a copy of it and exposed as :attr:`policy`.
        clock: Callable returning the current Unix time. Defaults to
            :func:`time.time`; tests inject a fake clock.

    Example::

        cache = StaticCache(StaticCacheConfig(enabled=True, cache_file_dir="/tmp/static"))
        if cache.policy.should_cache("/app.css"):
            entry = cache.lookup("/app.css")
            if entry is None:
                cache.store("/app.css", "text/css", b"body {}")
    """

    def __init__(
        self,
        config: StaticCacheConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._policy = CachePolicy(config)
        self._config = self._policy.config
        self._clock = clock
        self._cache_dir = config.cache_file_dir or DEFAULT_CACHE_DIR
        self._index: dict[str, CachedFile] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def policy(self) -> CachePolicy:
        """Eligibility rules for this cache."""
        return self._policy

    @property
    def config(self) -> StaticCacheConfig:
        """The configuration the cache was built with."""
        return self._config

    @property
    def cache_dir(self) -> Path:
        """Directory holding the artifacts."""
        return Path(self._cache_dir)

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def keys(self) -> list[str]:
        """Return a snapshot of the keys currently indexed (expired ones included)."""
        with self._lock:
            return list(self._index)

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    @staticmethod
    def normalize_key(request_path: str) -> str:
        """Derive the cache key for *request_path* by stripping one leading ``/``."""
        if request_path.startswith("/"):
            return request_path[1:]
        return request_path

    def lookup(self, request_path: str) -> Optional[CachedFile]:
        """Return the live entry for *request_path*, or ``None`` on a miss.

        An entry found past its expiry time counts as a miss. It is removed
        from the index and its artifact is deleted before returning;
        deletion failures are logged and otherwise ignored.
        """
        key = self.normalize_key(request_path)
        with self._lock:
            entry = self._index.get(key)
        if entry is None:
            logger.debug("Cache miss for %s", key)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache entry for %s expired", key)
            self._evict(key, entry)
            return None

        logger.debug("Cache hit for %s", key)
        return entry

    def store(self, request_path: str, content_type: str, content: bytes) -> CachedFile:
        """Write *content* to disk and index it under *request_path*.

        Any earlier entry for the same key is replaced as a whole. The
        expiry time is the current time plus the configured TTL.

        Args:
            request_path: Request path the body was served for.
            content_type: MIME type reported by the origin; may be empty.
            content: The exact response body.

        Returns:
            The newly indexed :class:`~staticcache.models.CachedFile`.

        Raises:
            CacheStorageError: If the cache directory cannot be created or
                the artifact cannot be written. The index is left as it was.
        """
        key = self.normalize_key(request_path)
        try:
            os.makedirs(self._cache_dir, exist_ok=True)
        except OSError as exc:
            raise CacheStorageError(
                f"Cannot create cache directory {self._cache_dir}: {exc}"
            ) from exc

        artifact_path = os.path.join(self._cache_dir, artifact_name(key))
        tmp_path = self._write_temp(artifact_path, content)

        entry = CachedFile(
            key=key,
            artifact_path=artifact_path,
            content_type=content_type,
            expiry_time=self._clock() + self._config.timeout,
        )
        with self._lock:
            try:
                os.replace(tmp_path, artifact_path)
            except OSError as exc:
                _remove_quietly(tmp_path)
                raise CacheStorageError(
                    f"Cannot write cache artifact {artifact_path}: {exc}"
                ) from exc
            self._index[key] = entry

        logger.debug("Stored %s (%d bytes) at %s", key, len(content), artifact_path)
        return entry

    def serve(self, sink: ResponseSink, entry: CachedFile) -> None:
        """Stream the artifact behind *entry* into *sink*.

        Sets ``Content-Type`` (the recorded type, or one guessed from the
        artifact's extension, or nothing) and a fixed one-hour public
        ``Cache-Control`` for browsers, then copies the file in chunks.

        Raises:
            ArtifactNotFoundError: If the artifact is gone, for example
                because it expired and was swept concurrently.
            ArtifactUnreadableError: If the artifact exists but cannot be
                opened. Nothing has been written to *sink* yet.
            CacheServeError: If reading the artifact or writing to the sink
                fails once streaming has started.
        """
        try:
            f = open(entry.artifact_path, "rb")
        except FileNotFoundError as exc:
            raise ArtifactNotFoundError(
                f"Cached artifact {entry.artifact_path} does not exist"
            ) from exc
        except OSError as exc:
            raise ArtifactUnreadableError(
                f"Cannot open cached artifact {entry.artifact_path}: {exc}"
            ) from exc

        with f:
            content_type = entry.content_type or _guess_content_type(entry.artifact_path)
            if content_type:
                sink.headers["Content-Type"] = content_type
            sink.headers["Cache-Control"] = BROWSER_CACHE_CONTROL

            try:
                for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                    sink.write(chunk)
            except OSError as exc:
                raise CacheServeError(
                    f"Failed streaming cached artifact {entry.artifact_path}: {exc}"
                ) from exc

    def sweep(self) -> int:
        """Remove every entry that has expired, along with its artifact.

        "Now" is read once when the sweep starts. Entries stored or
        overwritten while the sweep runs are left alone.

        Returns:
            The number of entries removed.
        """
        now = self._clock()
        with self._lock:
            snapshot = list(self._index.items())

        removed = 0
        for key, entry in snapshot:
            if entry.is_expired(now) and self._evict(key, entry):
                removed += 1

        if removed:
            logger.info("Swept %d expired cache entries from %s", removed, self._cache_dir)
        return removed

    # ------------------------------------------------------------------ #
    # Housekeeping
    # ------------------------------------------------------------------ #

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), ``entries`` (number of
            indexed entries), ``directory`` (str path), and ``ttl_seconds``.
        """
        return {
            "enabled": self._policy.is_enabled(),
            "entries": len(self),
            "directory": str(self.cache_dir),
            "ttl_seconds": self._config.timeout,
        }

    def orphaned_artifacts(self) -> list[Path]:
        """Return files in the cache directory that no index entry owns.

        In a freshly constructed cache every artifact left over from a
        previous process is an orphan. In-flight temp files are skipped.
        """
        if not self.cache_dir.is_dir():
            return []
        with self._lock:
            owned = {os.path.abspath(entry.artifact_path) for entry in self._index.values()}
        return sorted(
            p
            for p in self.cache_dir.iterdir()
            if p.is_file() and not _is_temp_file(p) and os.path.abspath(p) not in owned
        )

    def remove_orphans(self) -> list[Path]:
        """Delete orphaned artifacts and return the paths that were removed.

        Raises:
            CacheStorageError: If an orphan exists but cannot be deleted.
        """
        removed: list[Path] = []
        for path in self.orphaned_artifacts():
            with self._lock:
                if any(_same_file(e.artifact_path, path) for e in self._index.values()):
                    continue
                try:
                    path.unlink()
                except FileNotFoundError:
                    continue
                except OSError as exc:
                    raise CacheStorageError(f"Cannot remove orphan {path}: {exc}") from exc
            removed.append(path)
        return removed

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _write_temp(self, artifact_path: str, content: bytes) -> str:
        """Write *content* to a temp file beside *artifact_path* and return its path."""
        directory, name = os.path.split(artifact_path)
        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{name}.", suffix=_TMP_SUFFIX)
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            return tmp_path
        except OSError as exc:
            if tmp_path is not None:
                _remove_quietly(tmp_path)
            raise CacheStorageError(
                f"Cannot write cache artifact {artifact_path}: {exc}"
            ) from exc

    def _evict(self, key: str, entry: CachedFile) -> bool:
        """Drop *entry* and its artifact if the index still maps *key* to it."""
        with self._lock:
            if self._index.get(key) is not entry:
                return False
            del self._index[key]
            _remove_quietly(entry.artifact_path)
        return True


def artifact_name(key: str) -> str:
    """Map a cache key to a file name by replacing every ``/`` with ``_``.

    The mapping is lossy: ``a/b.css`` and ``a_b.css`` share a file.
    """
    return key.replace("/", "_")


def _guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path, strict=False)
    return content_type or ""


def _same_file(artifact_path: str, path: Path) -> bool:
    return os.path.abspath(artifact_path) == os.path.abspath(path)


def _is_temp_file(path: Path) -> bool:
    return path.name.startswith(".") and path.name.endswith(_TMP_SUFFIX)


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError as exc:
        logger.debug("Could not remove %s: %s", path, exc)
