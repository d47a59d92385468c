"""Locate the Android SDK and decide which versions the build uses.

The staged library project is compiled with three Gradle properties:
``compileSdk``, ``buildToolsVersion`` and ``supportVersion``. Values set in
:class:`~aarkit.models.ToolsConfig` win; anything left unset is detected
from the SDK installation (highest installed platform, highest installed
build tools).
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from aarkit.exceptions import ToolsError
from aarkit.models import AndroidToolsInfo, GlobalConfig
from aarkit.output import warning

_PLATFORM_DIR_RE = re.compile(r"^android-(\d+)$")


def find_android_home(config: GlobalConfig) -> Optional[Path]:
    """Return the SDK root from config, ``ANDROID_HOME`` or ``ANDROID_SDK_ROOT``."""
    candidates = [
        config.tools.android_home,
        os.environ.get("ANDROID_HOME"),
        os.environ.get("ANDROID_SDK_ROOT"),
    ]
    for candidate in candidates:
        if candidate:
            return Path(candidate).expanduser()
    return None


def _installed_platforms(android_home: Path) -> list[int]:
    platforms_dir = android_home / "platforms"
    if not platforms_dir.is_dir():
        return []
    levels = []
    for entry in platforms_dir.iterdir():
        match = _PLATFORM_DIR_RE.match(entry.name)
        if match and entry.is_dir():
            levels.append(int(match.group(1)))
    return sorted(levels)


def _version_key(version: str) -> tuple:
    # Numeric components compare as numbers, so "30.0.10" > "30.0.9".
    parts = []
    for piece in re.split(r"[.\-]", version):
        parts.append((1, int(piece), "") if piece.isdigit() else (0, 0, piece))
    return tuple(parts)


def _installed_build_tools(android_home: Path) -> list[str]:
    build_tools_dir = android_home / "build-tools"
    if not build_tools_dir.is_dir():
        return []
    versions = [entry.name for entry in build_tools_dir.iterdir() if entry.is_dir()]
    return sorted(versions, key=_version_key)


def resolve_tools_info(config: GlobalConfig) -> AndroidToolsInfo:
    """Combine configured and detected SDK details into :class:`AndroidToolsInfo`.

    Nothing is validated here; an SDK root that does not exist simply
    leaves the detected fields empty. Use :func:`validate_tools_info`.
    """
    tools = config.tools
    android_home = find_android_home(config)

    compile_sdk = tools.compile_sdk_version
    build_tools = tools.build_tools_version
    if android_home is not None and android_home.is_dir():
        if compile_sdk is None:
            platforms = _installed_platforms(android_home)
            compile_sdk = platforms[-1] if platforms else None
        if build_tools is None:
            installed = _installed_build_tools(android_home)
            build_tools = installed[-1] if installed else None

    return AndroidToolsInfo(
        android_home=android_home,
        compile_sdk_version=compile_sdk,
        build_tools_version=build_tools,
        support_repository_version=tools.support_repository_version,
    )


def validate_tools_info(
    info: AndroidToolsInfo, show_warnings_as_errors: bool = True
) -> list[str]:
    """Check that *info* describes a usable SDK.

    Args:
        info: Resolved SDK details.
        show_warnings_as_errors: Raise instead of printing warnings.

    Returns:
        The list of problems found (empty when the SDK is usable).

    Raises:
        ToolsError: If problems were found and *show_warnings_as_errors*
            is true.
    """
    problems: list[str] = []
    home = info.android_home

    if home is None:
        problems.append("ANDROID_HOME is not set and no tools.android_home is configured.")
    elif not home.is_dir():
        problems.append(f"Android SDK directory does not exist: {home}")
    else:
        if info.compile_sdk_version is None:
            problems.append(f"No Android platform is installed under {home / 'platforms'}.")
        elif not (home / "platforms" / f"android-{info.compile_sdk_version}").is_dir():
            problems.append(
                f"Android platform android-{info.compile_sdk_version} is not installed."
            )

        if info.build_tools_version is None:
            problems.append(f"No Android build tools are installed under {home / 'build-tools'}.")
        elif not (home / "build-tools" / info.build_tools_version).is_dir():
            problems.append(
                f"Android build tools {info.build_tools_version} are not installed."
            )

    if problems and show_warnings_as_errors:
        raise ToolsError(" ".join(problems))
    for problem in problems:
        warning(problem)
    return problems
