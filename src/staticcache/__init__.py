"""staticcache -- disk-backed, time-expiring cache for static HTTP responses.

This package sits in a reverse proxy's request path. It decides whether a
request path is eligible for caching, stores response bodies on disk with an
in-memory index entry that expires after a configured TTL, and serves later
matching requests straight from disk.

Typical embedding::

    from staticcache.cache import BufferedResponse, PeriodicSweeper, StaticCache
    from staticcache.models import StaticCacheConfig

    cache = StaticCache(StaticCacheConfig(enabled=True, cache_file_dir="/var/cache/static"))
    with PeriodicSweeper(cache, interval=300):
        ...

Modules:
    cache: Policy, index and store, response sinks, periodic sweeper.
    handler: Request handler that fronts an origin with the cache.
    models: Pydantic models for configuration and index entries.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting for the operator CLI.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"
