"""Build commands -- turn a plugin's ``platforms/android`` into an ``.aar``.

Provides the ``aarkit build`` sub-command group:

* ``aarkit build aar`` stages the plugin as an Android library project,
  runs Gradle, and copies ``<short-name>.aar`` to ``--output``.
* ``aarkit build migrate`` strips the ``productFlavors`` block that older
  plugins carry in ``include.gradle``.

Library errors are reported on stderr and mapped to their exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from aarkit.output import debug, error, info, status, success, suggest

build_app = typer.Typer(no_args_is_help=True)


@build_app.command("aar")
def build_aar_command(
    platforms_dir: Path = typer.Option(
        ...,
        "--platforms-dir",
        "-d",
        help="The plugin's platforms/android directory.",
        file_okay=False,
    ),
    temp_dir: Path = typer.Option(
        ..., "--temp-dir", "-t", help="Directory in which the library project is staged."
    ),
    plugin_name: Optional[str] = typer.Option(
        None, "--plugin-name", "-n", help="Plugin package name (default: myPlugin)."
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Directory that receives <short-name>.aar."
    ),
    gradle: Optional[str] = typer.Option(
        None, "--gradle", help="Gradle command used when the project has no wrapper."
    ),
    android_home: Optional[str] = typer.Option(
        None, "--android-home", help="Android SDK root."
    ),
    package_prefix: Optional[str] = typer.Option(
        None, "--package-prefix", help="Prefix of the default manifest package."
    ),
) -> None:
    """Build an Android archive from a plugin's native sources.

    Example::

        aarkit build aar -d ./platforms/android -t /tmp/aar -o ./dist \\
            --plugin-name @acme/camera-plus
    """
    from aarkit.builder import AndroidPluginBuildService
    from aarkit.builder.naming import DEFAULT_PLUGIN_NAME, get_short_plugin_name
    from aarkit.config import resolve_config
    from aarkit.exceptions import AarkitError
    from aarkit.models import BuildOptions
    from aarkit.plugins import PluginManager

    options = BuildOptions(
        plugin_name=plugin_name,
        platforms_android_dir=platforms_dir,
        aar_output_dir=output_dir,
        temp_plugin_dir=temp_dir,
    )
    try:
        config = resolve_config(
            cli_gradle=gradle,
            cli_android_home=android_home,
            cli_package_prefix=package_prefix,
        )
        with PluginManager() as plugins:
            loaded = plugins.discover(config)
            if loaded:
                debug(f"Loaded plugins: {', '.join(loaded)}")
            service = AndroidPluginBuildService(config, plugins.get_hook_runner())
            with status(f"Building {plugin_name or DEFAULT_PLUGIN_NAME}..."):
                built = service.build_aar(options)
    except AarkitError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not built:
        info(f"No AndroidManifest.xml or Android sources found in {platforms_dir}.")
        suggest("Nothing to build; the plugin ships no native Android code.")
        return
    if output_dir is not None:
        short_name = get_short_plugin_name(plugin_name or DEFAULT_PLUGIN_NAME)
        success(f"Built {output_dir / (short_name + '.aar')}")
    else:
        success(f"Built plugin in {temp_dir}")


@build_app.command("migrate")
def migrate_command(
    platforms_dir: Path = typer.Option(
        ...,
        "--platforms-dir",
        "-d",
        help="The plugin's platforms/android directory.",
        file_okay=False,
    ),
) -> None:
    """Remove the productFlavors block from a plugin's include.gradle.

    Example::

        aarkit build migrate -d ./platforms/android
    """
    from aarkit.builder import AndroidPluginBuildService
    from aarkit.config import resolve_config
    from aarkit.exceptions import AarkitError
    from aarkit.models import BuildOptions

    try:
        service = AndroidPluginBuildService(resolve_config())
        migrated = service.migrate_include_gradle(
            BuildOptions(platforms_android_dir=platforms_dir)
        )
    except AarkitError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if migrated:
        success(f"Migrated {platforms_dir / 'include.gradle'}")
    else:
        info(f"No include.gradle found in {platforms_dir}.")
