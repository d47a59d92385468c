"""The interface build plugins implement.

Only :attr:`Plugin.name` is required; every hook defaults to doing
nothing. A plugin is published as an ``aarkit.plugins`` entry point and
loaded by :class:`~aarkit.plugins.manager.PluginManager` at the start of
``aarkit build aar``.

Example:
    Plugin that turns on Gradle's offline mode for every build::

        class OfflinePlugin(Plugin):
            @property
            def name(self) -> str:
                return "offline"

            def on_before_build(self, ctx):
                ctx.args.append("--offline")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from aarkit.models import GlobalConfig

if TYPE_CHECKING:
    from aarkit.plugins.hooks import BuildHookContext


class Plugin(ABC):
    """A build plugin.

    Constructed without arguments, then :meth:`on_init` once, the build
    hooks around each Gradle run, and :meth:`cleanup` when the command ends.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique plugin name used for discovery and logging."""
        ...

    @property
    def version(self) -> str:
        """Return the plugin version string. Defaults to ``"0.1.0"``."""
        return "0.1.0"

    @property
    def description(self) -> str:
        """Return a brief description of what the plugin does."""
        return ""

    def on_init(self, config: GlobalConfig) -> None:
        """Receive the configuration the build will run with."""

    def on_before_build(self, ctx: BuildHookContext) -> None:
        """Called right before Gradle is started for a staged plugin.

        ``ctx.args`` is the full argument list (executable excluded) and may
        be edited in place; later plugins see the edits of earlier ones.
        """

    def on_after_build(self, ctx: BuildHookContext) -> None:
        """Called after Gradle exits successfully. ``ctx.return_code`` is set."""

    def on_error(self, error: Exception) -> None:
        """Called when the Gradle invocation fails.

        Exceptions raised inside this method are swallowed by the
        :class:`~aarkit.plugins.hooks.HookRunner` so they cannot mask the
        original failure.
        """

    def cleanup(self) -> None:
        """Release anything acquired in :meth:`on_init`."""
