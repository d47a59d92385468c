"""Build an Android plugin's native sources into an ``.aar`` archive.

:class:`AndroidPluginBuildService` is the orchestration layer: it stages a
conventional Android library project from a plugin's loose
``platforms/android`` directory, hands it to Gradle, and collects the
resulting archive. All file-system work lives in
:mod:`aarkit.builder.staging`; this module decides *what* happens and in
which order.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from aarkit.builder.naming import (
    DEFAULT_PLUGIN_NAME,
    default_package_name,
    get_short_plugin_name,
)
from aarkit.builder.staging import (
    BUILD_GRADLE_NAME,
    INCLUDE_GRADLE_NAME,
    MANIFEST_FILE_NAME,
    append_compile_dependencies,
    copy_gradle_template,
    copy_source_set,
    find_manifest,
    find_source_set_directories,
    read_bytes,
    read_text,
    write_text,
)
from aarkit.exceptions import ArtifactNotFoundError, InvalidUsageError, StagingError
from aarkit.gradle.runner import GradleRunner
from aarkit.gradle.scopes import PRODUCT_FLAVORS_SCOPE, remove_scope
from aarkit.gradle.tools import resolve_tools_info, validate_tools_info
from aarkit.manifest.merger import merge_manifest
from aarkit.models import BuildOptions, GlobalConfig, PluginBuildSettings
from aarkit.output import info
from aarkit.plugins.hooks import HookRunner

logger = logging.getLogger(__name__)


def built_aar_path(plugin_dir: Path, short_plugin_name: str) -> Path:
    """Return where ``assembleRelease`` leaves the archive for *short_plugin_name*."""
    return plugin_dir / "build" / "outputs" / "aar" / f"{short_plugin_name}-release.aar"


class AndroidPluginBuildService:
    """Stage, build, and collect a plugin's Android library archive.

    Args:
        config: Resolved configuration (see :func:`aarkit.config.resolve_config`).
        hook_runner: Plugin hooks run around the Gradle invocation.
        runner: Gradle runner to use. Built from ``config.build`` when omitted.
    """

    def __init__(
        self,
        config: GlobalConfig,
        hook_runner: Optional[HookRunner] = None,
        runner: Optional[GradleRunner] = None,
    ) -> None:
        self._config = config
        self._runner = runner or GradleRunner(config.build, hook_runner)

    def build_aar(self, options: BuildOptions) -> bool:
        """Build ``<short-name>.aar`` from ``options.platforms_android_dir``.

        Returns:
            ``True`` when an archive was built, ``False`` when the plugin has
            neither an ``AndroidManifest.xml`` nor any source-set directory.

        Raises:
            InvalidUsageError: If a required option is missing or invalid.
            StagingError: If a file cannot be read, written, or copied.
            ManifestParseError: If the plugin's manifest is malformed.
            ToolsError: If the Android SDK is unusable.
            BuildToolError: If Gradle fails.
            ArtifactNotFoundError: If Gradle succeeded but produced no archive.
        """
        self._validate_options(options)
        assert options.platforms_android_dir is not None
        assert options.temp_plugin_dir is not None

        build_config = self._config.build
        plugin_name = options.plugin_name or DEFAULT_PLUGIN_NAME
        short_name = get_short_plugin_name(plugin_name)
        plugin_dir = options.temp_plugin_dir / short_name
        main_src_dir = plugin_dir / "src" / "main"
        package_name = default_package_name(short_name, build_config.package_prefix)

        manifest_path = find_manifest(options.platforms_android_dir)
        source_dirs = find_source_set_directories(
            options.platforms_android_dir, build_config.ignore
        )
        if manifest_path is None and not source_dirs:
            logger.debug("Nothing to build in %s", options.platforms_android_dir)
            return False

        existing = read_bytes(manifest_path, "manifest file") if manifest_path else None
        write_text(
            main_src_dir / MANIFEST_FILE_NAME,
            merge_manifest(existing, package_name),
            "updated AndroidManifest",
        )

        for directory in source_dirs:
            copy_source_set(directory, main_src_dir / directory.name, build_config.ignore)

        copy_gradle_template(plugin_dir)

        include_gradle = options.platforms_android_dir / INCLUDE_GRADLE_NAME
        if include_gradle.is_file():
            scopes = append_compile_dependencies(include_gradle, plugin_dir / BUILD_GRADLE_NAME)
            logger.debug("Appended %d scopes from %s", len(scopes), include_gradle)

        tools_info = resolve_tools_info(self._config)
        validate_tools_info(tools_info, show_warnings_as_errors=True)

        self._runner.build_plugin(
            PluginBuildSettings(
                plugin_dir=plugin_dir,
                plugin_name=plugin_name,
                android_tools_info=tools_info,
            )
        )

        built = built_aar_path(plugin_dir, short_name)
        if not built.is_file():
            raise ArtifactNotFoundError(f"No built aar found at {built}")

        if options.aar_output_dir is not None:
            destination = options.aar_output_dir / f"{short_name}.aar"
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(built, destination)
            except OSError as exc:
                raise StagingError(f"Failed to copy built aar to destination. {exc}") from exc

        if build_config.clean and options.aar_output_dir is not None:
            shutil.rmtree(plugin_dir, ignore_errors=True)

        return True

    def migrate_include_gradle(self, options: BuildOptions) -> bool:
        """Drop the ``productFlavors`` block from the plugin's ``include.gradle``.

        Returns:
            ``True`` if ``include.gradle`` exists (rewritten only when it
            contained the block), ``False`` otherwise.
        """
        self._validate_platforms_android_dir_option(options)
        assert options.platforms_android_dir is not None

        include_gradle = options.platforms_android_dir / INCLUDE_GRADLE_NAME
        if not include_gradle.is_file():
            return False

        content = read_text(include_gradle, "include.gradle file")
        updated = remove_scope(content, PRODUCT_FLAVORS_SCOPE)
        if updated != content:
            write_text(include_gradle, updated, "updated include.gradle")
        return True

    def _validate_options(self, options: BuildOptions) -> None:
        if options is None:
            raise InvalidUsageError(
                "Android plugin cannot be built without passing an 'options' object."
            )

        if not options.plugin_name:
            info(f"No plugin name provided, defaulting to '{DEFAULT_PLUGIN_NAME}'.")

        if options.aar_output_dir is None:
            info(
                "No aar output directory provided, defaulting to the build outputs "
                "directory of the plugin"
            )

        if options.temp_plugin_dir is None:
            raise InvalidUsageError(
                "Android plugin cannot be built without passing the path to a "
                "directory where the temporary project should be built."
            )

        self._validate_platforms_android_dir_option(options)

    @staticmethod
    def _validate_platforms_android_dir_option(options: BuildOptions) -> None:
        if options is None:
            raise InvalidUsageError(
                "Android plugin cannot be built without passing an 'options' object."
            )
        if options.platforms_android_dir is None:
            raise InvalidUsageError(
                "Android plugin cannot be built without passing the path to the "
                "platforms/android dir."
            )
