"""Manifest and Gradle-scope commands that run without a build.

``aarkit manifest merge`` prints the manifest that ``build aar`` would
stage; ``aarkit manifest scopes`` prints the blocks it would lift out of
``include.gradle``. Both are handy for checking a plugin before invoking
Gradle.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from aarkit.output import OutputFormat, error, format_response, get_output

manifest_app = typer.Typer(no_args_is_help=True)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        error(f"Cannot read {path}: {exc}")
        raise typer.Exit(code=2) from None


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        error(f"Cannot read {path}: {exc}")
        raise typer.Exit(code=2) from None


@manifest_app.command("merge")
def merge_command(
    file: Optional[Path] = typer.Argument(
        None, help="Existing AndroidManifest.xml (omit to create a new one).", dir_okay=False
    ),
    package: str = typer.Option(
        ..., "--package", "-p", help="Package used when the manifest declares none."
    ),
) -> None:
    """Print FILE merged with a default package identifier.

    Example::

        aarkit manifest merge platforms/android/AndroidManifest.xml -p org.acme.camera
        aarkit manifest merge -p org.acme.camera
    """
    from aarkit.exceptions import ManifestError
    from aarkit.manifest import merge_manifest

    existing = _read_bytes(file) if file is not None else None
    try:
        merged = merge_manifest(existing, package)
    except ManifestError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(merged, "application/xml")


@manifest_app.command("scopes")
def scopes_command(
    file: Path = typer.Argument(..., help="An include.gradle file.", dir_okay=False),
    scope: Optional[str] = typer.Option(
        None, "--scope", "-s", help="Print only this block (e.g. productFlavors)."
    ),
) -> None:
    """Print the repositories and dependencies blocks of FILE.

    With ``--scope`` only the named block is printed. Exits with code 1
    when no matching block exists.

    Example::

        aarkit manifest scopes platforms/android/include.gradle
        aarkit manifest scopes platforms/android/include.gradle --scope productFlavors
        aarkit --json manifest scopes platforms/android/include.gradle
    """
    from aarkit.gradle import extract_compile_dependency_scopes, extract_scope

    text = _read_text(file)
    as_json = get_output().format == OutputFormat.JSON

    if scope is not None:
        span = extract_scope(text, scope)
        if span is None:
            error(f"No '{scope}' block found in {file}")
            raise typer.Exit(code=1)
        format_response(span.model_dump() if as_json else span.text, "text/x-groovy")
        return

    scopes = extract_compile_dependency_scopes(text)
    if not scopes:
        error(f"No dependencies block found in {file}")
        raise typer.Exit(code=1)
    format_response(scopes if as_json else "\n".join(scopes), "text/x-groovy")
