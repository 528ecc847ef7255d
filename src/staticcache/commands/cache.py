"""Cache commands -- inspect policy decisions and on-disk artifacts.

These commands build a fresh :class:`~staticcache.cache.StaticCache` from
the resolved configuration. Its in-memory index is empty, so every artifact
already on disk is reported as an orphan: nothing reconciles disk contents
with the index at startup, and ``orphans --purge`` is the manual cleanup.
"""

from __future__ import annotations

from typing import Optional

import typer

from staticcache.output import format_response, info, print_table, success


def _build_cache(ctx: typer.Context):
    from staticcache.cache import StaticCache
    from staticcache.config import resolve_config

    obj = ctx.obj or {}
    config = resolve_config(cli_cache_dir=obj.get("cache_dir"))
    return StaticCache(config.cache)


def check_command(
    ctx: typer.Context,
    paths: list[str] = typer.Argument(help="Request paths to evaluate."),
    size: Optional[int] = typer.Option(
        None, "--size", "-s", help="Body size in bytes to test against the size limit."
    ),
) -> None:
    """Show whether each request path would be cached.

    Example::

        staticcache check /app.css /api/data.json --size 2048
    """
    policy = _build_cache(ctx).policy
    headers = ["path", "cacheable"]
    if size is not None:
        headers.append("fits_size_limit")

    rows: list[list[str]] = []
    for path in paths:
        row = [path, str(policy.should_cache(path)).lower()]
        if size is not None:
            row.append(str(policy.fits_size_limit(size)).lower())
        rows.append(row)

    if not policy.is_enabled():
        info("Static caching is disabled; nothing will be cached.")
    print_table(headers, rows, title="Cache policy")


def stats_command(ctx: typer.Context) -> None:
    """Show the cache directory, TTL, and artifacts on disk."""
    cache = _build_cache(ctx)
    data = cache.stats()
    artifacts = cache.orphaned_artifacts()
    data["artifacts_on_disk"] = len(artifacts)
    data["bytes_on_disk"] = sum(p.stat().st_size for p in artifacts)
    format_response(data)


def orphans_command(
    ctx: typer.Context,
    purge: bool = typer.Option(False, "--purge", help="Delete the orphaned artifacts."),
) -> None:
    """List artifacts in the cache directory that no index entry owns.

    Example::

        staticcache orphans
        staticcache orphans --purge --force
    """
    cache = _build_cache(ctx)

    if not purge:
        orphans = cache.orphaned_artifacts()
        print_table(
            ["artifact", "bytes"],
            [[str(p), str(p.stat().st_size)] for p in orphans],
            title=f"Orphaned artifacts in {cache.cache_dir}",
        )
        return

    force = (ctx.obj or {}).get("force", False)
    if not force:
        confirmed = typer.confirm(f"Delete all orphaned artifacts in {cache.cache_dir}?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    removed = cache.remove_orphans()
    success(f"Removed {len(removed)} orphaned artifact(s).")
