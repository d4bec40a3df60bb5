"""Fragment parsing entry point.

Markup is parsed by html5lib (fragment mode, etree tree builder) and the
result is converted into `scrubhtml.node` nodes. A fresh html5lib parser is
created for every call, so parsing holds no shared state.
"""

from __future__ import annotations

import html5lib
from html5lib.constants import namespaces

from .node import CommentNode, ElementNode, SimpleDomNode, TextNode, document_fragment

_NAMESPACE_PREFIXES = {uri: prefix for prefix, uri in namespaces.items()}
_NAMESPACE_PREFIXES[namespaces["mathml"]] = "math"


class ParseError(ValueError):
    """The parser could not produce a tree for the given input."""


def _split_qualified(name):
    """Split an etree "{uri}local" name into (local, prefix)."""
    if not name.startswith("{"):
        return name, None
    uri, _, local = name[1:].partition("}")
    prefix = _NAMESPACE_PREFIXES.get(uri, uri)
    if prefix == "html":
        prefix = None
    return local, prefix


def _attrs_from_etree(attrib):
    attrs = {}
    for key, value in attrib.items():
        local, prefix = _split_qualified(key)
        attrs[f"{prefix}:{local}" if prefix else local] = value
    return attrs


def _from_etree(root) -> SimpleDomNode:
    # Iterative on purpose: nesting depth is controlled by the input.
    fragment = document_fragment()
    stack = [(root, fragment)]
    while stack:
        source, target = stack.pop()
        if source.text:
            target.append_child(TextNode(source.text))
        for child in source:
            if not isinstance(child.tag, str):
                target.append_child(CommentNode(child.text or ""))
            else:
                name, namespace = _split_qualified(child.tag)
                element = ElementNode(name, _attrs_from_etree(child.attrib), namespace)
                target.append_child(element)
                stack.append((child, element))
            if child.tail:
                target.append_child(TextNode(child.tail))
    return fragment


def parse_fragment(html, *, container="div") -> SimpleDomNode:
    """Parse an HTML fragment into a "#document-fragment" node.

    Raises ParseError only when html5lib itself fails; malformed markup is
    repaired by the parser the way browsers repair it.
    """
    if not isinstance(html, (str, bytes)):
        raise TypeError(f"Expected HTML text, got {type(html).__name__}")
    try:
        root = html5lib.parseFragment(
            html,
            container=container,
            treebuilder="etree",
            namespaceHTMLElements=False,
        )
    except Exception as exc:
        raise ParseError(f"Unable to parse HTML fragment: {exc}") from exc
    return _from_etree(root)
