"""Tests for CachePolicy eligibility and size decisions."""

from __future__ import annotations

from pathlib import Path

import pytest

from staticcache.cache import CachePolicy
from staticcache.models import (
    DEFAULT_FILE_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    StaticCacheConfig,
    default_static_cache_config,
)


def _policy(**overrides) -> CachePolicy:
    config = StaticCacheConfig(enabled=True, **overrides)
    return CachePolicy(config)


# ------------------------------------------------------------------ #
# Enabled switch
# ------------------------------------------------------------------ #


class TestEnabled:
    def test_disabled_by_default(self) -> None:
        assert CachePolicy(StaticCacheConfig()).is_enabled() is False

    def test_disabled_rejects_everything(self) -> None:
        policy = CachePolicy(StaticCacheConfig(enabled=False, file_extensions=[".css"]))
        assert policy.should_cache("/app.css") is False

    def test_enabled(self) -> None:
        assert _policy().is_enabled() is True


# ------------------------------------------------------------------ #
# Extension and skip rules
# ------------------------------------------------------------------ #


class TestShouldCache:
    def test_allowed_extension(self) -> None:
        assert _policy(file_extensions=[".css"]).should_cache("/app.css") is True

    def test_other_extension_rejected(self) -> None:
        assert _policy(file_extensions=[".css"]).should_cache("/app.js") is False

    @pytest.mark.parametrize("path", ["/APP.CSS", "/app.Css", "/theme/app.cSS"])
    def test_path_extension_case_insensitive(self, path: str) -> None:
        assert _policy(file_extensions=[".css"]).should_cache(path) is True

    def test_configured_extension_case_insensitive(self) -> None:
        assert _policy(file_extensions=[".CSS"]).should_cache("/app.css") is True

    @pytest.mark.parametrize("path", ["/", "/about", "/assets/logo", "/v1.2/readme"])
    def test_no_extension_never_matches(self, path: str) -> None:
        assert _policy(file_extensions=[".css", ""]).should_cache(path) is False

    def test_only_last_extension_counts(self) -> None:
        policy = _policy(file_extensions=[".css"])
        assert policy.should_cache("/app.css.map") is False
        assert policy.should_cache("/bundle.min.css") is True

    def test_dot_in_directory_is_not_an_extension(self) -> None:
        assert _policy(file_extensions=[".css"]).should_cache("/themes.css/index") is False

    def test_skip_substring_match(self) -> None:
        policy = _policy(file_extensions=[".css"], skip_subpaths=["/private/"])
        assert policy.should_cache("/private/app.css") is False
        assert policy.should_cache("/public/private/app.css") is False
        assert policy.should_cache("/app.css") is True

    def test_skip_is_substring_not_prefix(self) -> None:
        policy = _policy(file_extensions=[".js"], skip_subpaths=["admin"])
        assert policy.should_cache("/static/sysadmin.js") is False

    def test_skip_order_irrelevant(self) -> None:
        paths = ["/api/x.css", "/admin/y.css", "/z.css"]
        a = _policy(file_extensions=[".css"], skip_subpaths=["/api/", "/admin/"])
        b = _policy(file_extensions=[".css"], skip_subpaths=["/admin/", "/api/"])
        assert [a.should_cache(p) for p in paths] == [b.should_cache(p) for p in paths]

    def test_empty_extension_list_caches_nothing(self) -> None:
        assert _policy(file_extensions=[]).should_cache("/app.css") is False


# ------------------------------------------------------------------ #
# Size limit
# ------------------------------------------------------------------ #


class TestFitsSizeLimit:
    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_is_unlimited(self, limit: int) -> None:
        policy = _policy(max_file_size=limit)
        assert policy.fits_size_limit(0) is True
        assert policy.fits_size_limit(10**12) is True

    def test_limit_is_inclusive(self) -> None:
        policy = _policy(max_file_size=1000)
        assert policy.fits_size_limit(999) is True
        assert policy.fits_size_limit(1000) is True
        assert policy.fits_size_limit(1001) is False


# ------------------------------------------------------------------ #
# Construction and defaults
# ------------------------------------------------------------------ #


class TestConstruction:
    def test_creates_cache_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b"
        CachePolicy(StaticCacheConfig(cache_file_dir=str(target)))
        assert target.is_dir()

    def test_existing_dir_is_fine(self, tmp_path: Path) -> None:
        (tmp_path / "keep.css").write_text("x")
        CachePolicy(StaticCacheConfig(cache_file_dir=str(tmp_path)))
        CachePolicy(StaticCacheConfig(cache_file_dir=str(tmp_path)))
        assert (tmp_path / "keep.css").read_text() == "x"

    def test_uncreatable_dir_does_not_raise(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        policy = CachePolicy(StaticCacheConfig(cache_file_dir=str(blocker / "sub")))
        assert policy.is_enabled() is False

    def test_defaults(self, tmp_path: Path) -> None:
        config = default_static_cache_config(str(tmp_path))
        assert config.enabled is False
        assert config.timeout == 3600
        assert config.max_file_size == DEFAULT_MAX_FILE_SIZE == 25 * 1024 * 1024
        assert tuple(config.file_extensions) == DEFAULT_FILE_EXTENSIONS
        assert ".woff2" in config.file_extensions
        assert config.skip_subpaths == []
        assert config.cache_file_dir == str(tmp_path)

    def test_config_property(self) -> None:
        config = StaticCacheConfig(enabled=True)
        assert CachePolicy(config).config == config

    def test_later_config_edits_do_not_leak(self) -> None:
        config = StaticCacheConfig(
            enabled=True, file_extensions=[".css"], skip_subpaths=["/private/"], max_file_size=10
        )
        policy = CachePolicy(config)

        config.enabled = False
        config.file_extensions.append(".js")
        config.skip_subpaths.clear()
        config.max_file_size = 1

        assert policy.is_enabled()
        assert policy.should_cache("/app.css")
        assert not policy.should_cache("/app.js")
        assert not policy.should_cache("/private/app.css")
        assert policy.fits_size_limit(10)
