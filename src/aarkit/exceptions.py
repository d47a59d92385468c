"""Errors raised by aarkit, each tied to a process exit code.

Commands report an :class:`AarkitError` on stderr and exit with its
``exit_code``; :func:`aarkit.app.main` does the same for anything that
escapes a command. Any other exception is treated as a bug and gets a
crash log.

A scope that cannot be found in ``include.gradle`` is *not* an error: the
scope extractor returns ``None`` for that case.

Subclass hierarchy::

    AarkitError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- ToolsError             (exit 3)
    +-- ArtifactNotFoundError  (exit 4)
    +-- BuildToolError         (exit 5)
    +-- StagingError           (exit 6)
    +-- ManifestError          (exit 7)
    |   +-- ManifestParseError (exit 7)
    +-- PluginError            (exit 10)
    +-- ConfigError            (exit 1)
"""

from aarkit.exit_codes import (
    EXIT_ARTIFACT_NOT_FOUND,
    EXIT_BUILD_TOOL_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_ERROR,
    EXIT_PLUGIN_ERROR,
    EXIT_STAGING_ERROR,
    EXIT_TOOLS_ERROR,
)


class AarkitError(Exception):
    """Root of the hierarchy.

    Args:
        message: Shown to the user after ``Error:``.
        exit_code: Replaces the subclass default for this one instance.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AarkitError):
    """Raised for invalid CLI arguments or missing required build options."""

    exit_code = EXIT_INVALID_USAGE


class ToolsError(AarkitError):
    """Raised when the Android SDK cannot be located or lacks a required component."""

    exit_code = EXIT_TOOLS_ERROR


class ArtifactNotFoundError(AarkitError):
    """Raised when Gradle succeeds but the expected ``.aar`` file is missing."""

    exit_code = EXIT_ARTIFACT_NOT_FOUND


class BuildToolError(AarkitError):
    """Raised when the Gradle process cannot be started, times out, or fails."""

    exit_code = EXIT_BUILD_TOOL_FAILURE


class StagingError(AarkitError):
    """Raised when plugin sources cannot be read or the staged project cannot be written."""

    exit_code = EXIT_STAGING_ERROR


class ManifestError(AarkitError):
    """Raised when a manifest tree cannot be turned back into markup."""

    exit_code = EXIT_MANIFEST_ERROR


class ManifestParseError(ManifestError):
    """Raised when existing manifest content is not well-formed XML."""


class PluginError(AarkitError):
    """A build plugin could not be loaded or looked up."""

    exit_code = EXIT_PLUGIN_ERROR


class ConfigError(AarkitError):
    """``config.json`` or ``aarkit.json`` is unreadable or fails validation."""

    exit_code = EXIT_GENERIC_FAILURE
