"""Config commands -- view and modify global settings.

Provides the ``distmatrix config`` sub-command group for reading, updating,
and resetting the settings file (:class:`~distmatrix.models.GlobalConfig`):
request defaults, cache TTL, output format, and credential sources.
"""

from __future__ import annotations

import typer

from distmatrix.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current settings.

    Example::

        distmatrix config show
        distmatrix --json config show
    """
    from distmatrix.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'defaults.mode')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a settings value.

    Booleans and integers are coerced to match the current value; unset
    keys take the string as given and are parsed by the model.

    Example::

        distmatrix config set defaults.mode walking
        distmatrix config set api_key_source env:GOOGLE_MAPS_KEY
        distmatrix config set cache.ttl_seconds 600
    """
    from distmatrix.config import load_global_config, save_global_config
    from distmatrix.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value  # type: ignore[assignment]

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset settings to defaults."""
    from distmatrix.config import save_global_config
    from distmatrix.models import GlobalConfig

    if not force and not typer.confirm("Reset all settings to defaults?"):
        info("Aborted.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Settings reset to defaults")
