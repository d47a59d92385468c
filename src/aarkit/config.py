"""Where aarkit keeps its settings and how the effective config is resolved.

Three sources feed a build, from lowest to highest precedence:

1. ``config.json`` in the user config directory: ``$XDG_CONFIG_HOME/aarkit``
   on Linux and the BSDs, ``~/.aarkit`` elsewhere. Edited with
   ``aarkit config set``.
2. ``aarkit.json`` in the working directory, so a plugin repository can
   pin SDK versions or ignore patterns. Sections are deep-merged over the
   user config one key at a time.
3. ``AARKIT_GRADLE`` / ``AARKIT_PACKAGE_PREFIX`` environment variables,
   then the matching CLI flags.

The user config is rewritten through a temp file and ``os.replace`` so an
interrupted ``config set`` never leaves a truncated file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from aarkit.exceptions import ConfigError
from aarkit.models import GlobalConfig

_APP_NAME = "aarkit"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "aarkit.json"

ENV_GRADLE = "AARKIT_GRADLE"
ENV_PACKAGE_PREFIX = "AARKIT_PACKAGE_PREFIX"


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Return ``$env_var`` if set, else ``~/<default_segments...>``."""
    value = os.environ.get(env_var, "")
    if value:
        return Path(value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return (and create) the directory holding ``config.json``."""
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return (and create) the directory crash logs are written under."""
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* via a sibling temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


# --- User config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read the user config, or return defaults when none has been saved.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    data = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(_global_config_path(), data)


# --- Project config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Return the parsed ``./aarkit.json``, or ``None`` if there is none.

    Validation happens later, once the file has been merged over the user
    config; here it only has to be a JSON object.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Resolution ---


def resolve_config(
    cli_gradle: Optional[str] = None,
    cli_android_home: Optional[str] = None,
    cli_package_prefix: Optional[str] = None,
) -> GlobalConfig:
    """Build the configuration a command runs with.

    CLI flags beat environment variables, which beat ``./aarkit.json``,
    which beats the user config, which beats the model defaults.
    ``ANDROID_HOME`` is not copied in here; the SDK resolver consults it
    only when no ``tools.android_home`` is configured.

    Raises:
        ConfigError: If either config file is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        merged = _deep_merge(config.model_dump(mode="json"), project)
        try:
            config = GlobalConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    gradle = cli_gradle or os.environ.get(ENV_GRADLE)
    if gradle:
        config.build.gradle_command = gradle
    prefix = cli_package_prefix or os.environ.get(ENV_PACKAGE_PREFIX)
    if prefix:
        config.build.package_prefix = prefix
    if cli_android_home is not None:
        config.tools.android_home = cli_android_home

    return config
