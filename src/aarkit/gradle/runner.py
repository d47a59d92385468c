"""Run Gradle's ``assembleRelease`` on a staged Android library project.

The runner prefers the project's own wrapper (``gradlew`` / ``gradlew.bat``)
and falls back to :attr:`~aarkit.models.BuildConfig.gradle_command`. SDK
versions are passed as project properties consumed by the bundled
``build.gradle`` template::

    gradle -p <dir> assembleRelease -PcompileSdk=android-30 \\
        -PbuildToolsVersion=30.0.3 -PsupportVersion=28.0.0

Plugins registered through :mod:`aarkit.plugins` may rewrite the argument
list before Gradle starts and are told about the outcome afterwards.
"""

from __future__ import annotations

import logging
import platform
import subprocess
from pathlib import Path
from typing import Optional

from aarkit.exceptions import BuildToolError
from aarkit.models import BuildConfig, PluginBuildSettings
from aarkit.plugins.hooks import BuildHookContext, HookRunner

logger = logging.getLogger(__name__)

_STDERR_TAIL_LINES = 20


def _is_windows() -> bool:
    return platform.system() == "Windows"


class GradleRunner:
    """Invoke Gradle for one staged plugin at a time.

    Args:
        build_config: Gradle command, timeout, and extra arguments.
        hook_runner: Plugin hooks to run around each build. ``None`` runs
            without hooks.
    """

    def __init__(self, build_config: BuildConfig, hook_runner: Optional[HookRunner] = None) -> None:
        self._config = build_config
        self._hooks = hook_runner or HookRunner([])

    def resolve_executable(self, plugin_dir: Path) -> str:
        """Return the wrapper script inside *plugin_dir*, or the configured command."""
        wrapper = plugin_dir / ("gradlew.bat" if _is_windows() else "gradlew")
        if wrapper.is_file():
            return str(wrapper)
        return self._config.gradle_command

    def build_args(self, settings: PluginBuildSettings) -> list[str]:
        """Return the Gradle arguments (without the executable) for *settings*."""
        tools = settings.android_tools_info
        args = [
            "-p",
            str(settings.plugin_dir),
            "assembleRelease",
            f"-PcompileSdk=android-{tools.compile_sdk_version}",
            f"-PbuildToolsVersion={tools.build_tools_version}",
            f"-PsupportVersion={tools.support_repository_version}",
        ]
        args.extend(self._config.extra_args)
        return args

    def build_plugin(self, settings: PluginBuildSettings) -> BuildHookContext:
        """Run ``assembleRelease`` for the staged plugin described by *settings*.

        Returns:
            The hook context, with ``return_code`` set.

        Raises:
            BuildToolError: If Gradle is missing, times out, or exits non-zero.
        """
        ctx = BuildHookContext(
            plugin_name=settings.plugin_name,
            plugin_dir=settings.plugin_dir,
            executable=self.resolve_executable(settings.plugin_dir),
            args=self.build_args(settings),
            tools_info=settings.android_tools_info,
        )
        self._hooks.run_before_build(ctx)

        try:
            ctx.return_code = self._run(ctx)
        except BuildToolError as exc:
            ctx.error = exc
            self._hooks.run_error(exc)
            raise

        self._hooks.run_after_build(ctx)
        return ctx

    def _run(self, ctx: BuildHookContext) -> int:
        command = [ctx.executable, *ctx.args]
        logger.debug("Running %s in %s", " ".join(command), ctx.plugin_dir)
        try:
            result = subprocess.run(
                command,
                cwd=str(ctx.plugin_dir),
                capture_output=True,
                text=True,
                timeout=self._config.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            raise BuildToolError(
                f"Failed to build plugin {ctx.plugin_name} : \n"
                f"Gradle timed out after {self._config.timeout_seconds} seconds"
            ) from None
        except FileNotFoundError:
            raise BuildToolError(
                f"Failed to build plugin {ctx.plugin_name} : \n"
                f"Gradle executable not found: {ctx.executable}"
            ) from None

        if result.returncode != 0:
            output = result.stderr or result.stdout or ""
            tail = "\n".join(output.splitlines()[-_STDERR_TAIL_LINES:])
            raise BuildToolError(
                f"Failed to build plugin {ctx.plugin_name} : \n"
                f"Gradle exited with code {result.returncode}\n{tail}"
            )
        return result.returncode
