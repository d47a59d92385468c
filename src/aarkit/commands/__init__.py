"""Built-in CLI sub-commands for aarkit.

* :mod:`~aarkit.commands.build` -- build a plugin's ``.aar`` and migrate
  its ``include.gradle``.
* :mod:`~aarkit.commands.manifest` -- merge manifests and print Gradle
  scopes without running a build.
* :mod:`~aarkit.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application that
:func:`aarkit.app.main` registers on the root app.
"""
