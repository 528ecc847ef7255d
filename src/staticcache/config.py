"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for staticcache:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.staticcache/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~staticcache.models.GlobalConfig`
  JSON file holding the cache rule, sweep schedule, and origin settings.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the config file into the effective
  configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from staticcache.exceptions import ConfigError
from staticcache.models import GlobalConfig

_APP_NAME = "staticcache"
_CONFIG_FILENAME = "config.json"
_ARTIFACT_SUBDIR = "static"

_TRUTHY = ("1", "true", "yes", "on")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/staticcache/`` (default ``~/.config/staticcache/``).
    On macOS/Windows: ``~/.staticcache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Cached artifacts go in a ``static/`` subdirectory unless the config
    names another directory. Everything here can be deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/staticcache/`` (default ``~/.cache/staticcache/``).
    On macOS/Windows: ``~/.staticcache/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/staticcache/`` (default ``~/.local/share/staticcache/``).
    On macOS/Windows: ``~/.staticcache/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file, honouring ``STATICCACHE_CONFIG``."""
    override = os.environ.get("STATICCACHE_CONFIG")
    if override:
        return Path(override)
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~staticcache.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_config(
    cli_cache_dir: Optional[str] = None,
    cli_enabled: Optional[bool] = None,
) -> GlobalConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_cache_dir``, ``cli_enabled``)
        2. Environment variables (``STATICCACHE_CACHE_DIR``,
           ``STATICCACHE_ENABLED``, ``STATICCACHE_TTL``)
        3. User config (``~/.config/staticcache/config.json``)
        4. Defaults

    An empty ``cache.cache_file_dir`` after all layers is filled in with
    ``<cache dir>/static``.

    Raises:
        ConfigError: If the config file is invalid or ``STATICCACHE_TTL``
            is not an integer.
    """
    config = load_global_config()
    cache = config.cache

    env_dir = os.environ.get("STATICCACHE_CACHE_DIR")
    if env_dir:
        cache.cache_file_dir = env_dir

    env_enabled = os.environ.get("STATICCACHE_ENABLED")
    if env_enabled:
        cache.enabled = env_enabled.strip().lower() in _TRUTHY

    env_ttl = os.environ.get("STATICCACHE_TTL")
    if env_ttl:
        try:
            cache.timeout = int(env_ttl)
        except ValueError:
            raise ConfigError(f"STATICCACHE_TTL must be an integer, got: {env_ttl}") from None

    if cli_cache_dir is not None:
        cache.cache_file_dir = cli_cache_dir
    if cli_enabled is not None:
        cache.enabled = cli_enabled

    if not cache.cache_file_dir:
        cache.cache_file_dir = str(get_cache_dir() / _ARTIFACT_SUBDIR)

    return config
