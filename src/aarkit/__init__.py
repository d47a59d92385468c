"""aarkit -- Package native Android plugin sources into ``.aar`` libraries.

A cross-platform mobile plugin ships its Android-specific pieces under
``platforms/android`` (an ``AndroidManifest.xml``, ``res/``, ``java/``,
``assets/``, ``jniLibs/`` and an ``include.gradle``). aarkit stages those
pieces into a throwaway Android library project, merges or synthesizes the
manifest, carries the ``repositories``/``dependencies`` blocks over from
``include.gradle``, and runs Gradle to produce a distributable ``.aar``.

Typical workflow::

    aarkit build aar --platforms-dir ./platforms/android --temp-dir /tmp/aar \\
        --plugin-name nativescript-camera --output ./dist

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
