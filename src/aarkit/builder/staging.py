"""File-system side of a plugin build: discover, copy, and patch staged files.

A plugin's ``platforms/android`` directory is laid out loosely; authors
put ``res/`` or ``java/`` at any depth. The staged project, on the other
hand, is a conventional Android library::

    <temp>/<short-name>/
        build.gradle            (template + include.gradle scopes)
        settings.gradle
        gradle.properties
        src/main/
            AndroidManifest.xml
            res/  java/  assets/  jniLibs/

Every helper here raises :class:`~aarkit.exceptions.StagingError` with
the offending path when an ``OSError`` occurs.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

import pathspec

from aarkit.exceptions import StagingError
from aarkit.gradle.scopes import extract_compile_dependency_scopes

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "AndroidManifest.xml"
INCLUDE_GRADLE_NAME = "include.gradle"
BUILD_GRADLE_NAME = "build.gradle"
RESOURCES_DIR = "res"
ASSETS_DIR = "assets"
SOURCE_SET_DIRS = (RESOURCES_DIR, "java", ASSETS_DIR, "jniLibs")

GRADLE_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "gradle-plugin"


def _ignore_spec(patterns: list[str]) -> Optional[pathspec.PathSpec]:
    if not patterns:
        return None
    return pathspec.GitIgnoreSpec.from_lines(patterns)


def read_text(path: Path, what: str = "file") -> str:
    """Read *path* as UTF-8, wrapping ``OSError`` in :class:`StagingError`."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StagingError(f"Failed to read the {what} located at {path}: {exc}") from exc


def read_bytes(path: Path, what: str = "file") -> bytes:
    """Read *path* undecoded, for markup that names its own encoding."""
    try:
        return path.read_bytes()
    except OSError as exc:
        raise StagingError(f"Failed to read the {what} located at {path}: {exc}") from exc


def write_text(path: Path, content: str, what: str = "file") -> None:
    """Write *content* to *path*, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise StagingError(f"Failed to write the {what} to {path}: {exc}") from exc


def find_manifest(platforms_android_dir: Path) -> Optional[Path]:
    """Return ``<dir>/AndroidManifest.xml`` if it exists."""
    manifest = platforms_android_dir / MANIFEST_FILE_NAME
    return manifest if manifest.is_file() else None


def find_source_set_directories(source: Path, ignore: list[str]) -> list[Path]:
    """Find ``res``, ``java``, ``assets`` and ``jniLibs`` directories under *source*.

    Directories are matched by their exact name at any depth; a directory
    merely ending in one of the names (``myres``, ``legacy-java``) is not a
    source set and is searched like any other. A matched directory is
    not searched further, so ``java/com/example/res`` is copied as part of
    ``java`` rather than as a second ``res``. Directories matching
    *ignore* (gitignore syntax, relative to *source*) are pruned.

    Returns:
        Matched directories in sorted order.
    """
    if not source.is_dir():
        return []

    spec = _ignore_spec(ignore)
    found: list[Path] = []
    for dirpath, dirnames, _filenames in os.walk(str(source)):
        rel_dir = os.path.relpath(dirpath, str(source))
        keep: list[str] = []
        for name in sorted(dirnames):
            rel_path = name if rel_dir == "." else os.path.join(rel_dir, name)
            if spec is not None and spec.match_file(rel_path + "/"):
                continue
            if name in SOURCE_SET_DIRS:
                found.append(Path(dirpath) / name)
            else:
                keep.append(name)
        dirnames[:] = keep

    return sorted(found)


def copy_source_set(directory: Path, destination: Path, ignore: list[str]) -> int:
    """Copy the contents of *directory* into *destination* (merging).

    Args:
        directory: A source-set directory such as ``.../res``.
        destination: Target directory, e.g. ``src/main/res``.
        ignore: gitignore-style patterns, relative to *directory*.

    Returns:
        The number of files copied.
    """
    spec = _ignore_spec(ignore)
    copied = 0
    try:
        destination.mkdir(parents=True, exist_ok=True)
        for dirpath, dirnames, filenames in os.walk(str(directory)):
            rel_dir = os.path.relpath(dirpath, str(directory))

            def _rel(name: str) -> str:
                return name if rel_dir == "." else os.path.join(rel_dir, name)

            if spec is not None:
                dirnames[:] = [d for d in dirnames if not spec.match_file(_rel(d) + "/")]

            target_dir = destination if rel_dir == "." else destination / rel_dir
            target_dir.mkdir(parents=True, exist_ok=True)
            for fname in filenames:
                if spec is not None and spec.match_file(_rel(fname)):
                    continue
                shutil.copy2(os.path.join(dirpath, fname), target_dir / fname)
                copied += 1
    except OSError as exc:
        raise StagingError(f"Failed to copy {directory} to {destination}: {exc}") from exc

    logger.debug("Copied %d files from %s to %s", copied, directory, destination)
    return copied


def copy_gradle_template(destination: Path, template_dir: Path = GRADLE_TEMPLATE_DIR) -> None:
    """Copy the bundled Android library project template into *destination*."""
    try:
        shutil.copytree(template_dir, destination, dirs_exist_ok=True)
    except OSError as exc:
        raise StagingError(
            f"Failed to copy the gradle project template to {destination}: {exc}"
        ) from exc


def append_compile_dependencies(include_gradle: Path, build_gradle: Path) -> list[str]:
    """Append the ``repositories``/``dependencies`` blocks of *include_gradle*.

    Resources and the manifest may reference libraries declared in the
    plugin's ``include.gradle``; the staged project needs them at compile
    time too. Nothing is written when ``include.gradle`` has no
    ``dependencies`` block.

    Returns:
        The appended scopes (empty when nothing was appended).
    """
    scopes = extract_compile_dependency_scopes(read_text(include_gradle, INCLUDE_GRADLE_NAME))
    if not scopes:
        return []

    try:
        with open(build_gradle, "a", encoding="utf-8") as f:
            f.write("\n" + "\n".join(scopes))
    except OSError as exc:
        raise StagingError(f"Failed to update {build_gradle}: {exc}") from exc
    return scopes
