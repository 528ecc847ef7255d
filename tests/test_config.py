"""Tests for staticcache.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from staticcache.config import (
    _atomic_write,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    resolve_config,
    save_global_config,
)
from staticcache.exceptions import ConfigError
from staticcache.models import GlobalConfig, StaticCacheConfig, SweepConfig


def _write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_custom(self, isolated_config: Path) -> None:
        result = get_config_dir()
        assert result == isolated_config / "config" / "staticcache"
        assert result.is_dir()

    def test_cache_dir_custom(self, isolated_config: Path) -> None:
        result = get_cache_dir()
        assert result == isolated_config / "cache" / "staticcache"
        assert result.is_dir()

    def test_data_dir_custom(self, isolated_config: Path) -> None:
        result = get_data_dir()
        assert result == isolated_config / "data" / "staticcache"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("staticcache.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".config" / "staticcache"

    def test_fallback_on_non_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("staticcache.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".staticcache"
        assert get_cache_dir() == tmp_path / ".staticcache" / "cache"
        assert get_data_dir() == tmp_path / ".staticcache" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "config.json"
        _atomic_write(target, '{"a": 1}\n')
        assert target.read_text() == '{"a": 1}\n'

    def test_replaces_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        target.write_text("old")
        _atomic_write(target, "new")
        assert target.read_text() == "new"

    def test_failure_leaves_original_and_no_temp(self, tmp_path: Path) -> None:
        target = tmp_path / "config.json"
        target.write_text("old")

        with patch("staticcache.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                _atomic_write(target, "new")

        assert target.read_text() == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


# ---------------------------------------------------------------------------
# Global config load / save
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_missing_file_returns_defaults(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.cache.enabled is False
        assert config.sweep.interval_seconds == 300

    def test_save_and_load_round_trip(self, isolated_config: Path) -> None:
        config = GlobalConfig(
            cache=StaticCacheConfig(enabled=True, timeout=60, skip_subpaths=["/api/"]),
            sweep=SweepConfig(interval_seconds=30),
        )
        save_global_config(config)
        assert load_global_config() == config

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = global_config_path()
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_global_config()

    def test_validation_failure(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"cache": {"timeout": "soon"}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_non_positive_sweep_interval_rejected(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"sweep": {"interval_seconds": 0}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_config_path_env_override(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        custom = isolated_config / "elsewhere.json"
        _write_json(custom, {"cache": {"enabled": True}})
        monkeypatch.setenv("STATICCACHE_CONFIG", str(custom))

        assert global_config_path() == custom
        assert load_global_config().cache.enabled is True


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults_fill_cache_dir(self, isolated_config: Path) -> None:
        config = resolve_config()
        expected = isolated_config / "cache" / "staticcache" / "static"
        assert config.cache.cache_file_dir == str(expected)

    def test_file_value_used(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(cache=StaticCacheConfig(cache_file_dir="/srv/cache")))
        assert resolve_config().cache.cache_file_dir == "/srv/cache"

    def test_env_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        save_global_config(
            GlobalConfig(cache=StaticCacheConfig(enabled=False, timeout=10, cache_file_dir="/a"))
        )
        monkeypatch.setenv("STATICCACHE_CACHE_DIR", "/b")
        monkeypatch.setenv("STATICCACHE_ENABLED", "yes")
        monkeypatch.setenv("STATICCACHE_TTL", "120")

        cache = resolve_config().cache
        assert cache.cache_file_dir == "/b"
        assert cache.enabled is True
        assert cache.timeout == 120

    def test_env_enabled_false(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_global_config(GlobalConfig(cache=StaticCacheConfig(enabled=True)))
        monkeypatch.setenv("STATICCACHE_ENABLED", "0")
        assert resolve_config().cache.enabled is False

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STATICCACHE_CACHE_DIR", "/env")
        monkeypatch.setenv("STATICCACHE_ENABLED", "true")

        cache = resolve_config(cli_cache_dir="/cli", cli_enabled=False).cache
        assert cache.cache_file_dir == "/cli"
        assert cache.enabled is False

    def test_bad_ttl_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STATICCACHE_TTL", "an hour")
        with pytest.raises(ConfigError, match="STATICCACHE_TTL"):
            resolve_config()

    def test_resolve_does_not_persist(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STATICCACHE_ENABLED", "true")
        resolve_config()
        assert not global_config_path().exists()
        assert not os.environ.get("STATICCACHE_CONFIG")
