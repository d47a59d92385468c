"""Android manifest handling -- parse, merge, and serialise ``AndroidManifest.xml``.

Typical usage::

    from aarkit.manifest import merge_manifest

    text = merge_manifest(existing_text_or_none, "org.nativescript.camera")

Sub-modules:

* :mod:`~aarkit.manifest.xml` -- lxml-backed conversion between markup and
  :class:`~aarkit.models.ManifestNode` trees.
* :mod:`~aarkit.manifest.merger` -- package precedence rules and the
  fragment/complete-manifest merge.
"""

from aarkit.manifest.merger import (
    create_manifest_content,
    merge_manifest,
    update_manifest_content,
)
from aarkit.manifest.xml import parse_manifest, serialize_manifest

__all__ = [
    "create_manifest_content",
    "merge_manifest",
    "parse_manifest",
    "serialize_manifest",
    "update_manifest_content",
]
