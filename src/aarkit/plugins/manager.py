"""Find build plugins through entry points and keep them for one command.

Third-party packages register plugins in the ``aarkit.plugins`` group::

    [project.entry-points."aarkit.plugins"]
    offline = "my_package.plugin:OfflinePlugin"

``plugins.enabled`` in the config is an allowlist when non-empty;
``plugins.disabled`` is always a blocklist. The manager is a context
manager so ``build aar`` can guarantee ``cleanup`` runs::

    with PluginManager() as plugins:
        plugins.discover(config)
        service = AndroidPluginBuildService(config, plugins.get_hook_runner())
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Any, Optional

from aarkit.exceptions import PluginError
from aarkit.models import GlobalConfig, PluginsConfig
from aarkit.plugins.base import Plugin
from aarkit.plugins.hooks import HookRunner

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "aarkit.plugins"


def _permitted(name: str, settings: PluginsConfig) -> bool:
    if settings.enabled and name not in settings.enabled:
        return False
    return name not in settings.disabled


class PluginManager:
    """Registry of loaded plugins, keyed by entry-point name."""

    def __init__(self) -> None:
        self._registry: dict[str, Plugin] = {}
        self._runner: Optional[HookRunner] = None

    def __enter__(self) -> PluginManager:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup()

    def discover(self, config: GlobalConfig) -> list[str]:
        """Instantiate and register every permitted entry-point plugin.

        A plugin that fails to import, construct or initialise is logged
        and skipped; the build goes on without it.

        Returns:
            Entry-point names of the plugins now loaded, in discovery order.
        """
        loaded: list[str] = []
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            if not _permitted(ep.name, config.plugins):
                logger.debug("Skipping plugin '%s' (not permitted by config)", ep.name)
                continue
            try:
                self.load_plugin(ep.name, ep.load()(), config)
            except Exception as exc:
                logger.warning("Skipping plugin '%s': %s", ep.name, exc)
            else:
                loaded.append(ep.name)
        return loaded

    def load_plugin(self, name: str, plugin: Plugin, config: GlobalConfig) -> None:
        """Run ``plugin.on_init(config)`` and register the plugin as *name*.

        Raises:
            PluginError: If *name* is already registered.
        """
        if name in self._registry:
            raise PluginError(f"Plugin '{name}' is already loaded")
        plugin.on_init(config)
        self._registry[name] = plugin
        self._runner = None
        logger.info("Loaded plugin '%s' v%s", name, plugin.version)

    def get_plugin(self, name: str) -> Plugin:
        plugin = self._registry.get(name)
        if plugin is None:
            raise PluginError(f"Plugin '{name}' is not loaded")
        return plugin

    def list_plugins(self) -> list[dict[str, str]]:
        """Describe loaded plugins as ``name``/``version``/``description`` dicts."""
        return [
            {"name": p.name, "version": p.version, "description": p.description}
            for p in self._registry.values()
        ]

    def get_hook_runner(self) -> HookRunner:
        """Return a runner over the current plugins, rebuilt after each load."""
        if self._runner is None:
            self._runner = HookRunner(list(self._registry.values()))
        return self._runner

    def cleanup(self) -> None:
        """Call every plugin's ``cleanup`` (failures are logged) and unload all."""
        for name, plugin in self._registry.items():
            try:
                plugin.cleanup()
            except Exception as exc:
                logger.warning("Plugin '%s' failed to clean up: %s", name, exc)
        self._registry.clear()
        self._runner = None
