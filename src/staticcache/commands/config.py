"""Config commands -- view and modify the global configuration.

Provides the ``staticcache config`` sub-command group for reading,
updating, and resetting the persisted
:class:`~staticcache.models.GlobalConfig`: the cache rule, sweep schedule,
and origin settings.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from staticcache.exceptions import InvalidUsageError
from staticcache.output import format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the current configuration.

    Example::

        staticcache config show
        staticcache --json config show
    """
    from staticcache.config import global_config_path, load_global_config

    config = load_global_config()
    info(f"Config file: {global_config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.timeout')."
    ),
    value: str = typer.Argument(help="Value to set. Lists are comma-separated."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (bool, int, float, list, or str) and the updated
    config is validated before saving. A bad key or value raises
    :class:`~staticcache.exceptions.InvalidUsageError` (exit 2).

    Example::

        staticcache config set cache.enabled true
        staticcache config set cache.timeout 600
        staticcache config set cache.file_extensions .css,.js,.svg
    """
    from staticcache.config import load_global_config, save_global_config
    from staticcache.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            raise InvalidUsageError(f"Invalid config key: {key}")
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        raise InvalidUsageError(f"Unknown config key: {key}")

    try:
        coerced = _coerce(target[final_key], value)
    except ValueError:
        raise InvalidUsageError(
            f"Expected {type(target[final_key]).__name__} for {key}, got: {value}"
        ) from None

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise InvalidUsageError(f"Validation error: {exc}") from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.
    """
    from staticcache.config import save_global_config
    from staticcache.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")


def _coerce(current: Any, value: str) -> Any:  # noqa: ANN401
    """Convert *value* to the type of the *current* field value."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value
