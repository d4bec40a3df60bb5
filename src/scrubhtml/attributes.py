"""Attribute filtering driven by the schema's value classes."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .css import sanitize_declarations
from .flags import SINGLE_TOKEN_TYPES, TOKEN_LIST_TYPES, AType, ChangeKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .schema import SchemaView
    from .urls import TokenPolicy, UriRewriter

    AttributeRejectCallback = Callable[[str, str, ChangeKind], None]

logger = logging.getLogger(__name__)

_HTML_WHITESPACE = " \t\n\f\r"
_HTML_WHITESPACE_RE = re.compile(r"[ \t\n\f\r]+")


class _Dropped(Exception):
    """Internal: the current attribute is rejected as a whole."""


def _checked(result: object) -> str | None:
    if result is None or isinstance(result, str):
        return result
    raise TypeError(f"Rewriter returned {type(result).__name__}, expected str or None")


def _single_token(value: str, token_policy: TokenPolicy) -> str:
    token = value.strip(_HTML_WHITESPACE)
    if not token or _HTML_WHITESPACE_RE.search(token):
        raise _Dropped("expected a single token")
    result = _checked(token_policy(token))
    if not result:
        raise _Dropped("token rejected")
    return result


def _token_list(value: str, token_policy: TokenPolicy) -> tuple[str, int]:
    tokens = [t for t in _HTML_WHITESPACE_RE.split(value) if t]
    if not tokens:
        return "", 0
    kept: list[str] = []
    for token in tokens:
        result = _checked(token_policy(token))
        if result:
            kept.append(result)
    if not kept:
        raise _Dropped("all tokens rejected")
    return " ".join(kept), len(tokens) - len(kept)


def _uri_fragment(value: str, token_policy: TokenPolicy) -> str:
    value = value.strip(_HTML_WHITESPACE)
    if not value.startswith("#") or len(value) == 1:
        raise _Dropped("only same-document references are allowed")
    return "#" + _single_token(value[1:], token_policy)


def _sanitize_value(
    atype: AType,
    value: str,
    uri_rewriter: UriRewriter,
    token_policy: TokenPolicy,
) -> tuple[str, int]:
    """Return (new value, number of dropped parts); raise _Dropped to reject."""
    if atype is AType.NONE:
        return value, 0
    if atype is AType.URI:
        result = _checked(uri_rewriter(value))
        if result is None:
            raise _Dropped("URI rejected")
        return result, 0
    if atype is AType.URI_FRAGMENT:
        return _uri_fragment(value, token_policy), 0
    if atype in TOKEN_LIST_TYPES:
        return _token_list(value, token_policy)
    if atype in SINGLE_TOKEN_TYPES:
        return _single_token(value, token_policy), 0
    if atype is AType.FRAME_TARGET:
        if value.strip(_HTML_WHITESPACE).lower() != "_blank":
            raise _Dropped("only '_blank' targets are allowed")
        return "_blank", 0
    if atype is AType.STYLE:
        dropped: list[str] = []
        css = sanitize_declarations(value, uri_rewriter, on_reject=dropped.append)
        if not css:
            raise _Dropped("no CSS declaration survived")
        return css, len(dropped)
    if atype is AType.SCRIPT:
        raise _Dropped("script attribute")
    if atype is AType.HTML:
        raise _Dropped("HTML-valued attribute")
    raise _Dropped(f"unhandled value class {atype.name}")


def sanitize_attributes(
    tag_name: str,
    raw_attrs: Mapping[str, str | None] | Iterable[tuple[str, str | None]],
    *,
    schema: SchemaView,
    uri_rewriter: UriRewriter,
    token_policy: TokenPolicy,
    on_reject: AttributeRejectCallback | None = None,
) -> list[tuple[str, str | None]]:
    """Filter the attributes of one element.

    Every attribute is looked up in `schema` and handled according to its
    value class; unknown attributes are dropped. `on_reject(attr_name,
    reason, change)` is called once for every attribute that is dropped
    (`ChangeKind.REMOVED`) or kept with parts removed (`ChangeKind.CHANGED`).

    Exceptions raised by `uri_rewriter` or `token_policy` reject the
    attribute being processed and are logged; they never propagate.
    """
    items = raw_attrs.items() if hasattr(raw_attrs, "items") else raw_attrs
    tag = tag_name.lower()
    kept: list[tuple[str, str | None]] = []

    def reject(name: str, reason: str, change: ChangeKind = ChangeKind.REMOVED) -> None:
        if on_reject is not None:
            on_reject(name, reason, change)

    for raw_name, value in items:
        name = raw_name.lower()
        atype = schema.attribute_type(tag, name)
        if atype is None:
            reject(name, "attribute not allowed")
            continue
        if value is None:
            if atype is AType.NONE:
                kept.append((name, None))
            else:
                reject(name, "attribute requires a value")
            continue

        try:
            new_value, dropped_parts = _sanitize_value(atype, value, uri_rewriter, token_policy)
        except _Dropped as exc:
            reject(name, str(exc))
            continue
        except Exception:
            logger.warning("Rewriter failed on %s::%s, dropping attribute", tag, name, exc_info=True)
            reject(name, "rewriter failed")
            continue

        if dropped_parts:
            reject(name, f"{dropped_parts} part(s) of the value removed", ChangeKind.CHANGED)
        kept.append((name, new_value))
    return kept
