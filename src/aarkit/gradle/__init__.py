"""Gradle-facing helpers -- build-script scopes, SDK discovery, and the build call.

Sub-modules:

* :mod:`~aarkit.gradle.scopes` -- brace-balanced extraction of named
  blocks (``dependencies``, ``repositories``, ``productFlavors``) from
  ``include.gradle`` text.
* :mod:`~aarkit.gradle.tools` -- Android SDK location and version detection.
* :mod:`~aarkit.gradle.runner` -- ``assembleRelease`` invocation with
  plugin hooks.
"""

from aarkit.gradle.scopes import (
    extract_compile_dependency_scopes,
    extract_scope,
    remove_scope,
)

__all__ = ["extract_compile_dependency_scopes", "extract_scope", "remove_scope"]
