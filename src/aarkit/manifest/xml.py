"""Convert between manifest markup and :class:`~aarkit.models.ManifestNode` trees.

Parsing and serialising are delegated to :mod:`lxml`. This module only
translates between lxml's namespace-resolved element model and the
prefixed-name model used by :class:`~aarkit.models.ManifestNode`:

* ``{http://schemas.android.com/apk/res/android}name`` is stored as
  ``android:name``.
* A namespace declared on an element (not inherited from its parent) is
  stored as an ``xmlns:<prefix>`` attribute, or ``xmlns`` for the default
  namespace.
* Repeated child elements collapse into a list; comments and processing
  instructions are dropped; stripped, non-empty text is kept.
* ``android:`` and ``tools:`` may appear undeclared, as they do in
  fragments cut from a full manifest.

Only the semantic content survives a round trip. Whitespace, attribute
quoting and the relative order of differently named siblings may change.
"""

from __future__ import annotations

import codecs
import re
from typing import Optional, Union

from lxml import etree

from aarkit.exceptions import ManifestError, ManifestParseError
from aarkit.models import ManifestNode

_XMLNS = "xmlns"
_XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

ANDROID_NAMESPACE = "http://schemas.android.com/apk/res/android"
TOOLS_NAMESPACE = "http://schemas.android.com/tools"

# Prefixes a manifest fragment may use without declaring them, because the
# enclosing <manifest> normally carries the declaration.
IMPLIED_NAMESPACES = {"android": ANDROID_NAMESPACE, "tools": TOOLS_NAMESPACE}

_FRAGMENT_HOLDER = "aarkit-fragment"
_DECLARATION_RE = re.compile(r"^\s*<\?xml\s[^>]*\?>")
_DECLARED_ENCODING_RE = re.compile(
    rb"^\s*<\?xml\s[^>]*?encoding\s*=\s*[\"']([A-Za-z][A-Za-z0-9._-]*)[\"']"
)


def parse_manifest(content: Union[str, bytes]) -> ManifestNode:
    """Parse manifest markup into a :class:`ManifestNode` tree.

    ``android:`` and ``tools:`` prefixes may be used without a declaration
    (as they are in ``<application>`` fragments); names keep their prefix
    and the declaration is left to the enclosing ``<manifest>``, see
    :func:`~aarkit.manifest.merger.merge_manifest_tree`.

    Args:
        content: XML document. Bytes are decoded with the encoding named in
            their XML declaration (UTF-8 when there is none); a declaration
            in text is ignored since the text is already decoded.

    Returns:
        The root element as a :class:`ManifestNode`.

    Raises:
        ManifestParseError: If *content* is empty, cannot be decoded, or is
            not well-formed XML (including prefixes other than the implied
            ones that are never declared).
    """
    text = _decode(content) if isinstance(content, bytes) else content
    text = _DECLARATION_RE.sub("", text.lstrip("\ufeff"), count=1)
    if not text.strip():
        raise ManifestParseError("Manifest content is empty")

    try:
        root = etree.fromstring(text, _parser())
    except etree.XMLSyntaxError as exc:
        if not _only_undefined_prefixes(exc):
            raise ManifestParseError(f"Invalid manifest XML: {exc}") from exc
        return _parse_with_implied_namespaces(text, exc)

    return _element_to_node(root, parent_nsmap={})


def _parser() -> etree.XMLParser:
    return etree.XMLParser(remove_comments=True, remove_pis=True, resolve_entities=False)


def _decode(data: bytes) -> str:
    if data.startswith(codecs.BOM_UTF8):
        encoding = "utf-8-sig"
    elif data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        encoding = "utf-16"
    else:
        match = _DECLARED_ENCODING_RE.match(data)
        encoding = match.group(1).decode("ascii") if match else "utf-8"
    try:
        return data.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise ManifestParseError(f"Cannot decode manifest as {encoding}: {exc}") from exc


def _only_undefined_prefixes(exc: etree.XMLSyntaxError) -> bool:
    errors = [e for e in exc.error_log if e.level >= etree.ErrorLevels.ERROR]
    return bool(errors) and all(
        e.type == etree.ErrorTypes.NS_ERR_UNDEFINED_NAMESPACE for e in errors
    )


def _parse_with_implied_namespaces(
    text: str, original: etree.XMLSyntaxError
) -> ManifestNode:
    """Parse *text* inside a holder element that declares the implied prefixes."""
    declarations = " ".join(
        f'xmlns:{prefix}="{uri}"' for prefix, uri in IMPLIED_NAMESPACES.items()
    )
    wrapped = f"<{_FRAGMENT_HOLDER} {declarations}>{text}</{_FRAGMENT_HOLDER}>"
    try:
        holder = etree.fromstring(wrapped, _parser())
    except etree.XMLSyntaxError:
        raise ManifestParseError(f"Invalid manifest XML: {original}") from original

    # Stray text or a second root would not have been well-formed on its own.
    elements = [child for child in holder if isinstance(child.tag, str)]
    stray = (holder.text or "") + "".join(child.tail or "" for child in holder)
    if len(elements) != 1 or stray.strip():
        raise ManifestParseError(f"Invalid manifest XML: {original}") from original

    return _element_to_node(elements[0], parent_nsmap=dict(holder.nsmap))


def serialize_manifest(node: ManifestNode) -> str:
    """Serialise a :class:`ManifestNode` tree to pretty-printed XML text.

    The output starts with
    ``<?xml version='1.0' encoding='UTF-8' standalone='yes'?>``.

    Raises:
        ManifestError: If an element or attribute uses a namespace prefix
            that is not declared on it or on one of its ancestors.
    """
    root = _node_to_element(node, parent=None, scope={"xml": _XML_NAMESPACE})
    data = etree.tostring(
        root,
        pretty_print=True,
        xml_declaration=True,
        encoding="UTF-8",
        standalone=True,
    )
    return data.decode("utf-8")


# ------------------------------------------------------------------ #
# lxml -> ManifestNode
# ------------------------------------------------------------------ #


def _prefixed(qualified: str, nsmap: dict[Optional[str], str], attribute: bool) -> str:
    """Turn a Clark-notation name into ``prefix:local`` using *nsmap*."""
    qname = etree.QName(qualified)
    if qname.namespace is None:
        return qname.localname
    if qname.namespace == _XML_NAMESPACE:
        return f"xml:{qname.localname}"
    for prefix, uri in nsmap.items():
        if uri != qname.namespace:
            continue
        # Unprefixed attributes never live in the default namespace.
        if prefix is None and attribute:
            continue
        return qname.localname if prefix is None else f"{prefix}:{qname.localname}"
    return qname.localname


def _element_to_node(element: etree._Element, parent_nsmap: dict) -> ManifestNode:
    nsmap = dict(element.nsmap)
    node = ManifestNode(name=_prefixed(element.tag, nsmap, attribute=False))

    for prefix, uri in nsmap.items():
        if parent_nsmap.get(prefix) == uri:
            continue
        key = _XMLNS if prefix is None else f"{_XMLNS}:{prefix}"
        node.attributes[key] = uri

    for key, value in element.attrib.items():
        node.attributes[_prefixed(key, nsmap, attribute=True)] = value

    if element.text is not None and element.text.strip():
        node.text = element.text.strip()

    for child in element:
        if not isinstance(child.tag, str):
            continue
        node.add_child(_element_to_node(child, parent_nsmap=nsmap))

    return node


# ------------------------------------------------------------------ #
# ManifestNode -> lxml
# ------------------------------------------------------------------ #


def _resolve(name: str, scope: dict[Optional[str], str], attribute: bool) -> str:
    """Turn ``prefix:local`` into Clark notation using the in-scope namespaces."""
    if ":" in name:
        prefix, local = name.split(":", 1)
        uri = scope.get(prefix)
        if uri is None:
            raise ManifestError(f"Namespace prefix '{prefix}' is not declared for '{name}'")
        return f"{{{uri}}}{local}"
    if not attribute and scope.get(None):
        return f"{{{scope[None]}}}{name}"
    return name


def _node_to_element(
    node: ManifestNode,
    parent: Optional[etree._Element],
    scope: dict[Optional[str], str],
) -> etree._Element:
    declared: dict[Optional[str], str] = {}
    plain: dict[str, str] = {}
    for key, value in node.attributes.items():
        if key == _XMLNS:
            declared[None] = value
        elif key.startswith(f"{_XMLNS}:"):
            declared[key.split(":", 1)[1]] = value
        else:
            plain[key] = value

    scope = {**scope, **declared}
    tag = _resolve(node.name, scope, attribute=False)
    if parent is None:
        element = etree.Element(tag, nsmap=declared or None)
    else:
        element = etree.SubElement(parent, tag, nsmap=declared or None)

    for key, value in plain.items():
        element.set(_resolve(key, scope, attribute=True), value)

    if node.text is not None:
        element.text = node.text

    for child in node.iter_children():
        _node_to_element(child, parent=element, scope=scope)

    return element
