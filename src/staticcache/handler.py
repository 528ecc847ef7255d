"""Request handler that puts a :class:`~staticcache.cache.StaticCache` in front of an origin.

:class:`CachingHandler` implements the request path a reverse proxy runs for
one rule:

1. Ask the policy whether the path is cacheable.
2. On an unexpired hit, stream the artifact from disk.
3. Otherwise fetch the path from the origin with :mod:`httpx`, relay the
   response, and store the body when it is a cacheable 200 within the size
   limit.

A hit whose artifact has vanished or cannot be opened falls back to the origin, and a body that
cannot be stored is still returned to the client. An I/O error halfway
through streaming a hit is raised, since part of the body has already been
written to the sink.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from staticcache.cache import PeriodicSweeper, ResponseSink, StaticCache
from staticcache.exceptions import ArtifactUnavailableError, CacheStorageError, OriginError
from staticcache.models import GlobalConfig

logger = logging.getLogger(__name__)

# Headers that describe the origin connection or encoding rather than the
# (already decoded) body that is relayed.
_HOP_HEADERS = frozenset(
    {
        "connection",
        "content-encoding",
        "content-length",
        "keep-alive",
        "transfer-encoding",
    }
)


class CachingHandler:
    """Serve GET requests from the static cache, falling back to the origin.

    Args:
        cache: The shared cache for this proxy rule.
        origin: An :class:`httpx.Client` whose ``base_url`` points at the
            origin server. The handler does not close a client it was given.

    Example::

        with CachingHandler.from_config(config) as handler:
            sink = BufferedResponse()
            hit = handler.handle("/static/app.css", sink)
    """

    def __init__(self, cache: StaticCache, origin: httpx.Client) -> None:
        self._cache = cache
        self._origin = origin
        self._owns_origin = False
        self._sweeper: Optional[PeriodicSweeper] = None

    @classmethod
    def from_config(
        cls,
        config: GlobalConfig,
        cache: Optional[StaticCache] = None,
    ) -> CachingHandler:
        """Build a handler, its cache, and its origin client from *config*.

        When ``config.sweep.enabled`` is set and the cache is enabled, a
        :class:`~staticcache.cache.PeriodicSweeper` is started for the cache
        and stopped again by :meth:`close`.
        """
        origin = httpx.Client(
            base_url=config.origin.base_url or "",
            timeout=config.origin.timeout,
            verify=config.origin.verify_ssl,
            follow_redirects=True,
        )
        handler = cls(cache or StaticCache(config.cache), origin)
        handler._owns_origin = True
        if config.sweep.enabled and handler.cache.policy.is_enabled():
            handler._sweeper = PeriodicSweeper(handler.cache, config.sweep.interval_seconds)
            handler._sweeper.start()
        return handler

    @property
    def cache(self) -> StaticCache:
        return self._cache

    @property
    def sweeper(self) -> Optional[PeriodicSweeper]:
        """The background sweeper started by :meth:`from_config`, if any."""
        return self._sweeper

    def handle(self, request_path: str, sink: ResponseSink) -> bool:
        """Answer a GET for *request_path* into *sink*.

        Returns:
            ``True`` if the response came from the cache, ``False`` if it
            was fetched from the origin.

        Raises:
            OriginError: On network or timeout errors talking to the origin.
            CacheServeError: If streaming a hit fails after part of the body
                has reached *sink*.
        """
        cacheable = self._cache.policy.should_cache(request_path)

        if cacheable:
            entry = self._cache.lookup(request_path)
            if entry is not None:
                try:
                    self._cache.serve(sink, entry)
                    return True
                except ArtifactUnavailableError as exc:
                    logger.warning("Cached artifact for %s unavailable, refetching: %s", request_path, exc)

        response = self._fetch(request_path)
        _relay(response, sink)

        if (
            cacheable
            and response.status_code == 200
            and self._cache.policy.fits_size_limit(len(response.content))
        ):
            try:
                self._cache.store(
                    request_path,
                    response.headers.get("content-type", ""),
                    response.content,
                )
            except CacheStorageError as exc:
                logger.warning("Could not cache %s: %s", request_path, exc)
        return False

    def close(self) -> None:
        """Stop the sweeper and close the origin client if this handler created them."""
        if self._sweeper is not None:
            self._sweeper.stop()
            self._sweeper = None
        if self._owns_origin:
            self._origin.close()

    def __enter__(self) -> CachingHandler:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _fetch(self, request_path: str) -> httpx.Response:
        try:
            return self._origin.get(request_path)
        except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
            raise OriginError(f"Origin request for {request_path} failed: {exc}") from exc


def _relay(response: httpx.Response, sink: ResponseSink) -> None:
    """Copy status, headers, and body of an origin *response* into *sink*."""
    if hasattr(sink, "status_code"):
        sink.status_code = response.status_code
    for name, value in response.headers.items():
        if name.lower() not in _HOP_HEADERS:
            sink.headers[name] = value
    sink.write(response.content)

