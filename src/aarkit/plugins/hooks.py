"""Build hook context and runner for the plugin lifecycle.

* :class:`BuildHookContext` -- A mutable dataclass describing one Gradle
  invocation. Fields are progressively populated as the build advances.
* :class:`HookRunner` -- Executes ``on_before_build``, ``on_after_build``,
  and ``on_error`` across all loaded plugins in registration order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from aarkit.models import AndroidToolsInfo
from aarkit.plugins.base import Plugin

logger = logging.getLogger(__name__)


@dataclass
class BuildHookContext:
    """Mutable context object threaded through the build hook chain.

    Attributes:
        plugin_name: The plugin package name being built.
        plugin_dir: The staged Android library project.
        executable: Gradle executable that will be started.
        args: Gradle arguments (mutable, edited by ``on_before_build``).
        tools_info: Android SDK details used for the build.
        return_code: Gradle's exit status once the process has finished.
        error: Exception instance if the build failed, otherwise ``None``.
    """

    plugin_name: str
    plugin_dir: Path
    executable: str = ""
    args: list[str] = field(default_factory=list)
    tools_info: Optional[AndroidToolsInfo] = None
    return_code: Optional[int] = None
    error: Optional[Exception] = None


class HookRunner:
    """Executes plugin hooks across all loaded plugins in registration order.

    Holds an immutable snapshot of the plugin list at creation time. If new
    plugins are loaded, a new runner must be obtained from the manager.
    """

    def __init__(self, plugins: list[Plugin]) -> None:
        self._plugins = list(plugins)

    def run_before_build(self, ctx: BuildHookContext) -> BuildHookContext:
        """Execute ``on_before_build`` hooks; returns the same *ctx*."""
        for plugin in self._plugins:
            plugin.on_before_build(ctx)
        return ctx

    def run_after_build(self, ctx: BuildHookContext) -> BuildHookContext:
        """Execute ``on_after_build`` hooks; returns the same *ctx*."""
        for plugin in self._plugins:
            plugin.on_after_build(ctx)
        return ctx

    def run_error(self, error: Exception) -> None:
        """Execute ``on_error`` hooks, swallowing failures raised by the hooks."""
        for plugin in self._plugins:
            try:
                plugin.on_error(error)
            except Exception as exc:
                logger.debug("Error hook of plugin '%s' failed: %s", plugin.name, exc)
