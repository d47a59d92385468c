"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~aarkit.exceptions.AarkitError` subclass.
CI scripts can inspect the exit code to tell a broken manifest from a
failed Gradle run without parsing stderr.

Example::

    $ aarkit build aar --platforms-dir ./platforms/android --temp-dir /tmp/x
    $ echo $?
    5   # EXIT_BUILD_TOOL_FAILURE -- gradle exited non-zero
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required options."""

EXIT_TOOLS_ERROR = 3
"""The Android SDK installation is missing or incomplete."""

EXIT_ARTIFACT_NOT_FOUND = 4
"""The build finished but the expected ``.aar`` was not produced."""

EXIT_BUILD_TOOL_FAILURE = 5
"""Gradle could not be started, timed out, or exited with a non-zero status."""

EXIT_STAGING_ERROR = 6
"""Reading plugin sources or writing the staged project failed."""

EXIT_MANIFEST_ERROR = 7
"""The Android manifest could not be parsed or serialized."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load, initialise, or execute."""

EXIT_CANCELLED = 130
"""Interrupted with Ctrl-C (128 + SIGINT)."""
