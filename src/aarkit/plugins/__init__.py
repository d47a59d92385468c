"""Plugin system for aarkit -- discovery, loading, and build hooks.

Third-party packages can register plugins by declaring an entry point in
the ``aarkit.plugins`` group. At runtime, :class:`PluginManager` discovers
and loads those entry points, and the :class:`HookRunner` calls their
before-build, after-build, and error hooks around every Gradle run.

Key classes:

* :class:`Plugin` -- Abstract base class that all plugins must extend.
* :class:`PluginManager` -- Discovers, loads, and manages plugin lifecycle.
* :class:`HookRunner` -- Executes hooks across loaded plugins in order.
* :class:`BuildHookContext` -- Mutable dataclass describing one Gradle run.

Example::

    from aarkit.plugins import PluginManager

    with PluginManager() as manager:
        manager.discover(config)
        runner = manager.get_hook_runner()
"""

from aarkit.plugins.base import Plugin
from aarkit.plugins.hooks import BuildHookContext, HookRunner
from aarkit.plugins.manager import PluginManager

__all__ = ["Plugin", "BuildHookContext", "HookRunner", "PluginManager"]
