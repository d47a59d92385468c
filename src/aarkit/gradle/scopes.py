"""Lift named, brace-delimited blocks out of Gradle build-script text.

Gradle scripts are Groovy (or Kotlin) programs, not structured data, so no
general parser is used here. A block such as::

    dependencies {
        implementation "com.google.code.gson:gson:2.8.6"
        constraints { implementation "androidx.core:core:1.3.0" }
    }

is located by the first occurrence of its name and extended up to the
closing brace that balances the first opening brace after it. Formatting
and nested blocks are preserved verbatim so the slice can be appended to
another script unchanged.

The name lookup is a plain substring search. ``dependencies`` inside a
comment, a string literal, or a longer identifier (``myDependencies``) is
matched too; callers that care must arrange their input accordingly.
"""

from __future__ import annotations

from typing import Optional

from aarkit.models import ScopeSpan

OPENING_BRACKET = "{"
CLOSING_BRACKET = "}"

DEPENDENCIES_SCOPE = "dependencies"
REPOSITORIES_SCOPE = "repositories"
PRODUCT_FLAVORS_SCOPE = "productFlavors"


def extract_scope(text: str, scope_name: str) -> Optional[ScopeSpan]:
    """Return the first brace-balanced block introduced by *scope_name*.

    Scanning starts at the first occurrence of *scope_name*. The depth
    counter starts at zero; an opening brace seen at depth zero marks the
    block as opened. The scan stops, inclusive, on the first character
    after which the block is opened and the depth is back to zero.

    Args:
        text: Build-script source.
        scope_name: Block name, e.g. ``"dependencies"``.

    Returns:
        The located :class:`~aarkit.models.ScopeSpan`, or ``None`` when
        *scope_name* does not occur or its block is never closed.
    """
    start = text.find(scope_name)
    if start == -1:
        return None

    depth = 0
    opened = False
    for index in range(start, len(text)):
        char = text[index]
        if char == OPENING_BRACKET:
            if depth == 0:
                opened = True
            depth += 1
        elif char == CLOSING_BRACKET:
            depth -= 1

        if opened and depth == 0:
            end = index + 1
            return ScopeSpan(
                scope_name=scope_name,
                start_offset=start,
                end_offset=end,
                text=text[start:end],
            )

    return None


def extract_compile_dependency_scopes(text: str) -> list[str]:
    """Return the ``repositories`` and ``dependencies`` blocks of *text*.

    The result is empty when there is no ``dependencies`` block, even if a
    ``repositories`` block exists. Otherwise the ``repositories`` block (if
    any) comes first so the blocks can be joined and appended to a build
    script with repositories declared before the dependencies that need
    them.
    """
    dependencies = extract_scope(text, DEPENDENCIES_SCOPE)
    if dependencies is None:
        return []

    result: list[str] = []
    repositories = extract_scope(text, REPOSITORIES_SCOPE)
    if repositories is not None:
        result.append(repositories.text)
    result.append(dependencies.text)
    return result


def remove_scope(text: str, scope_name: str) -> str:
    """Return *text* with the first *scope_name* block cut out.

    *text* is returned unchanged when the block cannot be located.
    """
    span = extract_scope(text, scope_name)
    if span is None:
        return text
    return text[: span.start_offset] + text[span.end_offset :]
