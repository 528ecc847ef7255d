"""Shared test fixtures for staticcache.

Provides a controllable clock for expiry tests, ready-made cache
configurations rooted in ``tmp_path``, config-directory isolation, and
output-state reset. These fixtures are discovered automatically by pytest.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from staticcache.cache import StaticCache
from staticcache.models import StaticCacheConfig
from staticcache.output import reset_output


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test."""
    yield
    reset_output()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "static"


@pytest.fixture
def css_config(cache_dir: Path) -> StaticCacheConfig:
    """The configuration used throughout the examples: CSS only, 5 s TTL, 1000-byte cap."""
    return StaticCacheConfig(
        enabled=True,
        timeout=5,
        max_file_size=1000,
        file_extensions=[".css"],
        skip_subpaths=["/private/"],
        cache_file_dir=str(cache_dir),
    )


@pytest.fixture
def cache(css_config: StaticCacheConfig, clock: FakeClock) -> StaticCache:
    return StaticCache(css_config, clock=clock)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path and clears
    every STATICCACHE_* environment variable so tests never touch real
    user config.
    """
    monkeypatch.setattr("staticcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "STATICCACHE_CONFIG",
        "STATICCACHE_CACHE_DIR",
        "STATICCACHE_ENABLED",
        "STATICCACHE_TTL",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
