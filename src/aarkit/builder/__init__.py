"""Stage a plugin's Android sources as a library project and build it.

* :mod:`~aarkit.builder.naming` -- short plugin names and default packages.
* :mod:`~aarkit.builder.staging` -- source-set discovery and file copying.
* :mod:`~aarkit.builder.service` -- :class:`AndroidPluginBuildService`.
"""

from aarkit.builder.service import AndroidPluginBuildService

__all__ = ["AndroidPluginBuildService"]
