"""Config commands -- view and modify global configuration.

Provides the ``aarkit config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~aarkit.models.GlobalConfig`). The settings seed every build:
SDK versions, the Gradle command, the default package prefix, and copy
ignore patterns.
"""

from __future__ import annotations

import json

import typer

from aarkit.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Global, project (``./aarkit.json``) and environment settings are
    merged exactly as ``aarkit build aar`` would see them.

    Example::

        aarkit config show
        aarkit --json config show
    """
    from aarkit.config import get_config_dir, resolve_config
    from aarkit.exceptions import ConfigError

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


def _parse_list(value: str) -> list:
    """Accept a JSON array or a comma-separated string."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return [item.strip() for item in value.split(",") if item.strip()]
    if not isinstance(parsed, list):
        raise ValueError(f"expected a list, got: {value}")
    return parsed


def _assign(data: dict, key: str, value: str) -> None:
    """Store *value* under dotted *key* in *data*, which must already hold it."""
    *sections, field = key.split(".")
    section = data
    for name in sections:
        section = section.get(name)
        if not isinstance(section, dict):
            raise KeyError(key)
    if field not in section or isinstance(section[field], dict):
        raise KeyError(key)
    section[field] = _parse_list(value) if isinstance(section[field], list) else value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'build.gradle_command')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a global configuration value.

    Scalars are converted by the config model (``30`` for an SDK level,
    ``true`` for a flag). List fields take a JSON array or a
    comma-separated string.

    Example::

        aarkit config set tools.compile_sdk_version 30
        aarkit config set build.ignore '*.iml,build/'
    """
    from aarkit.config import load_global_config, save_global_config
    from aarkit.exceptions import ConfigError
    from aarkit.models import GlobalConfig

    try:
        data = load_global_config().model_dump(mode="json")
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    try:
        _assign(data, key, value)
        updated = GlobalConfig.model_validate(data)
    except KeyError:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2) from None
    except ValueError as exc:
        error(f"Invalid value for {key}: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(updated)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the global configuration to defaults.

    Example::

        aarkit config reset --force
    """
    from aarkit.config import save_global_config
    from aarkit.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
