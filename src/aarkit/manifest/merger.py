"""Merge an existing Android manifest with a default package identifier.

The staged library project always needs an ``AndroidManifest.xml`` whose
root ``<manifest>`` declares a ``package``. Plugin authors ship anything
from a complete manifest to a bare ``<application>`` fragment, or nothing
at all. :func:`merge_manifest` normalises all three into a manifest that
keeps everything the author wrote and is guaranteed to name a package.

Precedence for the package identifier (the *effective identifier*):

1. A non-empty ``package`` on an existing top-level ``<manifest>``.
2. The supplied default (``org.nativescript.<short-name>`` for builds).

A fragment never contributes a package, even if some nested element
carries a ``package`` attribute.
"""

from __future__ import annotations

from typing import Optional, Union

from aarkit.manifest.xml import (
    ANDROID_NAMESPACE,
    IMPLIED_NAMESPACES,
    parse_manifest,
    serialize_manifest,
)
from aarkit.models import ManifestNode

MANIFEST_TAG = "manifest"
PACKAGE_ATTRIBUTE = "package"


def merge_manifest(
    existing_content: Optional[Union[str, bytes]], default_identifier: str
) -> str:
    """Return manifest text that declares a package, keeping existing content.

    Args:
        existing_content: The plugin's ``AndroidManifest.xml`` as text or raw
            bytes, or ``None`` when the plugin ships none.
        default_identifier: Package to use when the existing content does
            not declare one on its ``<manifest>`` element.

    Returns:
        The serialised manifest.

    Raises:
        ManifestParseError: If *existing_content* is not well-formed XML.
    """
    if existing_content is None:
        return create_manifest_content(default_identifier)
    return update_manifest_content(existing_content, default_identifier)


def create_manifest_content(package_name: str) -> str:
    """Serialise the minimal manifest: the Android namespace plus *package_name*."""
    return serialize_manifest(build_empty_manifest(package_name))


def update_manifest_content(
    old_manifest_content: Union[str, bytes], default_package_name: str
) -> str:
    """Parse *old_manifest_content* and rewrap it under a ``<manifest>`` root.

    A parsed ``<manifest>`` keeps its attributes and children. Any other
    root element is treated as a fragment and placed as the only child of a
    new ``<manifest>`` that declares the Android namespace.
    """
    parsed = parse_manifest(old_manifest_content)
    return serialize_manifest(merge_manifest_tree(parsed, default_package_name))


def build_empty_manifest(package_name: str) -> ManifestNode:
    """Return a fresh ``<manifest>`` node with the Android namespace and a package."""
    return ManifestNode(
        name=MANIFEST_TAG,
        attributes={
            "xmlns:android": ANDROID_NAMESPACE,
            PACKAGE_ATTRIBUTE: package_name,
        },
    )


def merge_manifest_tree(parsed: ManifestNode, default_package_name: str) -> ManifestNode:
    """Build the merged ``<manifest>`` tree from a parsed document root.

    The input tree is not modified; the returned root is a new node that
    shares the (untouched) descendants of *parsed*. ``android:`` and
    ``tools:`` prefixes used anywhere in the tree without a declaration
    are declared on the returned root.
    """
    package_name = effective_identifier(parsed, default_package_name)

    if parsed.name == MANIFEST_TAG:
        merged = ManifestNode(
            name=MANIFEST_TAG,
            attributes=dict(parsed.attributes),
            children=dict(parsed.children),
            text=parsed.text,
        )
    else:
        merged = ManifestNode(
            name=MANIFEST_TAG, attributes={"xmlns:android": ANDROID_NAMESPACE}
        )
        merged.add_child(parsed)

    for prefix in sorted(_undeclared_prefixes(merged, frozenset())):
        if prefix in IMPLIED_NAMESPACES:
            merged.attributes[f"xmlns:{prefix}"] = IMPLIED_NAMESPACES[prefix]
    merged.attributes[PACKAGE_ATTRIBUTE] = package_name
    return merged


def _undeclared_prefixes(node: ManifestNode, declared: frozenset[str]) -> set[str]:
    names = [node.name]
    for key in node.attributes:
        if key.startswith("xmlns:"):
            declared = declared | {key.split(":", 1)[1]}
        elif key != "xmlns":
            names.append(key)

    missing = {
        name.split(":", 1)[0]
        for name in names
        if ":" in name and not name.startswith("xml:")
    } - declared
    for child in node.iter_children():
        missing |= _undeclared_prefixes(child, declared)
    return missing


def effective_identifier(parsed: ManifestNode, default_package_name: str) -> str:
    """Return the package that wins for *parsed* given *default_package_name*."""
    if parsed.name == MANIFEST_TAG:
        declared = parsed.attributes.get(PACKAGE_ATTRIBUTE)
        if declared:
            return declared
    return default_package_name
