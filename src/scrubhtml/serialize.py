"""HTML serialization utilities for scrubhtml DOM nodes."""

from __future__ import annotations

from typing import Any

from .constants import RAWTEXT_ELEMENTS, VOID_ELEMENTS

# The parser drops one newline right after these start tags.
_LEADING_NEWLINE_ELEMENTS = frozenset({"pre", "textarea", "listing"})


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _choose_attr_quote(value: str | None) -> str:
    if value is None:
        return '"'
    value = str(value)
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str | None, quote_char: str) -> str:
    if value is None:
        return ""
    value = str(value).replace("&", "&amp;")
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&#39;")


def serialize_start_tag(name: str, attrs: dict[str, str | None] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        # Valueless and empty attributes reparse to the same empty value.
        if value is None or value == "":
            parts.extend([" ", key])
            continue
        quote = _choose_attr_quote(value)
        parts.extend([" ", key, "=", quote, _escape_attr_value(value, quote), quote])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(node: Any) -> str:
    """Convert a node (usually a "#document-fragment") to an HTML string.

    Output is compact: no indentation or whitespace is added, so parsing the
    result again yields the same tree.
    """
    parts: list[str] = []
    _node_to_html(node, parts, raw_text=False)
    return "".join(parts)


def _node_to_html(node: Any, parts: list[str], *, raw_text: bool) -> None:
    name: str = node.name

    if name == "#text":
        parts.append((node.data or "") if raw_text else _escape_text(node.data))
        return

    if name == "#comment":
        parts.append(f"<!--{node.data or ''}-->")
        return

    if name in {"#document", "#document-fragment"}:
        for child in node.children:
            _node_to_html(child, parts, raw_text=raw_text)
        return

    parts.append(serialize_start_tag(name, node.attrs))
    if name in VOID_ELEMENTS and not node.is_foreign:
        return
    if name in _LEADING_NEWLINE_ELEMENTS and not node.is_foreign and node.children:
        first = node.children[0]
        if first.name == "#text" and (first.data or "").startswith("\n"):
            parts.append("\n")
    child_raw = name in RAWTEXT_ELEMENTS and not node.is_foreign
    for child in node.children:
        _node_to_html(child, parts, raw_text=child_raw)
    parts.append(serialize_end_tag(name))
