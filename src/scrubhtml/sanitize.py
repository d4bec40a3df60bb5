"""Sanitization entry points.

`sanitize()` parses an untrusted HTML fragment, walks the tree with a
`TagPolicy`, serializes the survivors and finally filters the contents of any
surviving <style> elements. Every removal is reported as a `RemovalEvent`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import DEFAULT_MAX_DEPTH
from .css import sanitize_css
from .flags import ChangeKind, EFlags, PolicyMode
from .node import TextNode
from .parser import parse_fragment
from .policy import Keep, RemovalEvent, TagPolicy
from .schema import DEFAULT_SCHEMA, ElementSchema
from .serialize import to_html
from .urls import UrlRule, keep_token
from .verify import is_equivalent_structure

if TYPE_CHECKING:
    from collections.abc import Callable

    from .urls import TokenPolicy, UriRewriter

    EventCallback = Callable[[RemovalEvent], None]
    RejectCallback = Callable[[str], None]

logger = logging.getLogger(__name__)

_STYLE_TAG_RE = re.compile(r"<style", re.IGNORECASE)

_MAX_REPARSE_ROUNDS = 8


@dataclass(frozen=True, slots=True)
class SanitizationPolicy:
    """Configuration shared by sanitize(), sanitize_html() and is_safe().

    - `schema` holds the element and attribute allow-lists.
    - URL-valued attributes and CSS url() values go through `uri_rewriter`
      when set, otherwise through `url_rule`.
    - `token_policy` filters ids, names and class tokens.
    - Elements nested deeper than `max_depth` are removed.
    """

    schema: ElementSchema = DEFAULT_SCHEMA
    url_rule: UrlRule = field(default_factory=UrlRule)

    # `uri_rewriter(value)` returns the value to emit, or None to drop it.
    uri_rewriter: UriRewriter | None = None
    token_policy: TokenPolicy = keep_token

    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not isinstance(self.schema, ElementSchema):
            raise TypeError(f"schema must be an ElementSchema, got {type(self.schema).__name__}")
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer, got {self.max_depth!r}")

    @property
    def rewriter(self) -> UriRewriter:
        return self.uri_rewriter if self.uri_rewriter is not None else self.url_rule

    def tag_policy(self, mode: PolicyMode, on_event: EventCallback | None = None) -> TagPolicy:
        return TagPolicy(
            self.schema.for_mode(mode),
            uri_rewriter=self.rewriter,
            token_policy=self.token_policy,
            on_event=on_event,
        )


DEFAULT_POLICY: SanitizationPolicy = SanitizationPolicy()


@dataclass(frozen=True, slots=True)
class SanitizationResult:
    source: str
    sanitized: str
    # False as soon as anything was removed or changed.
    maybe_safe: bool
    events: tuple[RemovalEvent, ...] = ()


def _log_event(event: RemovalEvent) -> None:
    logger.debug("HTML Sanitizer: %s", event)


def _sanitize_children(node: Any, tag_policy: TagPolicy, depth: int, max_depth: int) -> None:
    kept: list[Any] = []
    for child in node.children:
        kept.extend(_sanitize_node(child, tag_policy, depth, max_depth))
    node.replace_children(kept)


def _sanitize_node(node: Any, tag_policy: TagPolicy, depth: int, max_depth: int) -> list[Any]:
    name = node.name
    if name == "#text":
        return [node]
    if not node.is_element:
        # Comments never survive.
        return []

    if node.is_foreign:
        tag_policy.report(f"{node.namespace}:{name}", "foreign element")
        return []
    if depth > max_depth:
        tag_policy.report(name, f"element nested deeper than {max_depth}")
        return []

    flags = tag_policy.schema.element_flags(name)
    if flags is not None and flags & EFlags.FOLDABLE:
        _sanitize_children(node, tag_policy, depth, max_depth)
        return list(node.children)

    decision = tag_policy.decide(name, node.attrs)
    if not isinstance(decision, Keep):
        return []
    node.attrs = dict(decision.attrs)
    _sanitize_children(node, tag_policy, depth + 1, max_depth)
    return [node]


def sanitize_tree(root: Any, tag_policy: TagPolicy, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Sanitize `root`'s descendants in place and return `root`.

    `root` itself (usually a "#document-fragment") is not judged.
    """
    _sanitize_children(root, tag_policy, 1, max_depth)
    return root


def reparse_to_fixed_point(markup: str) -> str:
    """Reserialize `markup` until parsing it gives the same markup back.

    The parser repairs misnested input (adoption agency, foster parenting)
    into trees that do not always survive a second parse unchanged.
    """
    for _ in range(_MAX_REPARSE_ROUNDS):
        again = to_html(parse_fragment(markup))
        if again == markup:
            break
        markup = again
    return markup


def sanitize_style_elements(
    sanitized_markup: str,
    tag_policy: TagPolicy,
    *,
    on_reject: RejectCallback | None = None,
) -> str:
    """Replace the text of every <style> element with its sanitized CSS.

    `on_reject(reason)` is called for each dropped CSS unit. Markup without
    a <style> tag is returned unchanged, without reparsing.
    """
    if not _STYLE_TAG_RE.search(sanitized_markup):
        return sanitized_markup

    root = parse_fragment(sanitized_markup)
    for style in root.iter_elements("style"):
        if style.is_foreign:
            continue
        css = sanitize_css(style.to_text(), tag_policy, on_reject=on_reject)
        style.replace_children([TextNode(css)] if css else [])
    return to_html(root)


def sanitize(
    html: str,
    allow_css: bool = True,
    *,
    policy: SanitizationPolicy = DEFAULT_POLICY,
    on_event: EventCallback | None = None,
) -> SanitizationResult:
    """Sanitize an untrusted HTML fragment.

    With `allow_css=False` all <style> elements and style attributes are
    removed; otherwise their CSS is filtered. `on_event` receives every
    `RemovalEvent` in addition to the returned `SanitizationResult.events`.

    Raises `TypeError` for non-text input and `scrubhtml.ParseError` when the
    parser itself fails. Hostile or malformed markup never raises.
    """
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    if not isinstance(html, str):
        raise TypeError(f"Expected HTML text, got {type(html).__name__}")

    events: list[RemovalEvent] = []

    def collect(event: RemovalEvent) -> None:
        events.append(event)
        _log_event(event)
        if on_event is not None:
            on_event(event)

    mode = PolicyMode.ALLOW_CSS if allow_css else PolicyMode.STRIP_CSS
    tag_policy = policy.tag_policy(mode, collect)

    root = sanitize_tree(parse_fragment(html), tag_policy, max_depth=policy.max_depth)
    sanitized = reparse_to_fixed_point(to_html(root))

    if mode is PolicyMode.ALLOW_CSS:
        sanitized = sanitize_style_elements(
            sanitized,
            tag_policy,
            on_reject=lambda reason: tag_policy.report("style", reason, change=ChangeKind.CHANGED),
        )

    return SanitizationResult(
        source=html,
        sanitized=sanitized,
        maybe_safe=not events,
        events=tuple(events),
    )


def sanitize_html(html: str, allow_css: bool = True, *, policy: SanitizationPolicy = DEFAULT_POLICY) -> str:
    """Shorthand for `sanitize(html, allow_css, policy=policy).sanitized`."""
    return sanitize(html, allow_css, policy=policy).sanitized


def is_safe(html: str, *, policy: SanitizationPolicy = DEFAULT_POLICY) -> bool:
    """Return True if sanitizing `html` changed nothing observable.

    Both the sanitizer's own events and an independent comparison of the
    element skeletons before and after must agree.
    """
    result = sanitize(html, policy=policy)
    if not result.maybe_safe:
        return False
    return is_equivalent_structure(
        parse_fragment(result.sanitized),
        parse_fragment(result.source),
        max_depth=policy.max_depth,
    )
