"""Disk-backed caching of static response bodies.

This package provides :class:`CachePolicy`, which decides whether a request
path may be cached, and :class:`StaticCache`, which stores bodies on disk,
indexes them in memory with an expiry time, and streams them back out.
Expiry is purely time based: stale entries are dropped lazily on lookup and
in bulk by :meth:`StaticCache.sweep`, which :class:`PeriodicSweeper` can call
on a timer.

One :class:`StaticCache` is built per proxy rule from that rule's
:class:`~staticcache.models.StaticCacheConfig` and shared by all of its
request handlers.
"""

from staticcache.cache.policy import CachePolicy
from staticcache.cache.response import BufferedResponse, ResponseSink
from staticcache.cache.store import StaticCache, artifact_name
from staticcache.cache.sweeper import PeriodicSweeper

__all__ = [
    "BufferedResponse",
    "CachePolicy",
    "PeriodicSweeper",
    "ResponseSink",
    "StaticCache",
    "artifact_name",
]
