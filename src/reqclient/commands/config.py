"""Config commands -- view and modify the global configuration.

Provides the ``reqclient config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~reqclient.models.GlobalConfig`). Settings are persisted in the
reqclient config directory and supply client defaults (base URL, headers,
timeout, retry policy) and the output format.
"""

from __future__ import annotations

import typer

from reqclient.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

# Nested mappings whose keys are free-form rather than declared fields.
_OPEN_KEYS = (("client", "headers"),)


@config_app.command("show")
def config_show() -> None:
    """Show the current global configuration.

    Example::

        reqclient config show
        reqclient --json config show
    """
    from reqclient.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g. 'client.timeout' or 'client.headers.Accept')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (bool or int). Keys under ``client.headers`` may
    be new. The updated config is validated before saving.

    Example::

        reqclient config set client.base_url https://api.example.com
        reqclient config set client.retry_attempts 3
        reqclient config set client.headers.Accept application/json
    """
    from reqclient.config import load_global_config, save_global_config
    from reqclient.models import GlobalConfig

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
    if final_key not in target and tuple(keys[:-1]) not in _OPEN_KEYS:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target.get(final_key)
    coerced: object = value
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None

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
    """Reset configuration to defaults.

    Example::

        reqclient config reset --force
    """
    from reqclient.config import save_global_config
    from reqclient.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
