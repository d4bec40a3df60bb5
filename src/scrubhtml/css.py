"""CSS sanitization for <style> contents and style attributes.

Stylesheets are tokenized by tinycss2 and rebuilt from the parts that pass
the allow-lists in `scrubhtml.constants`:

- declarations: allow-listed property, allow-listed functions only, every
  url() accepted by the URI rewriter (and replaced by its result);
- selectors: type/class/id/attribute selectors, allow-listed pseudo-classes
  and pseudo-elements; each selector of a selector list is judged alone;
- at-rules: only @media, with its rules sanitized recursively.

Rejections happen at the smallest unit (one declaration, one selector, one
rule). The output format is fixed, so sanitizing the output again returns it
unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import tinycss2
from tinycss2 import ast
from tinycss2.serializer import serialize_url

from .constants import (
    ALLOWED_ATTRIBUTE_SELECTOR_LITERALS,
    ALLOWED_CSS_FUNCTIONS,
    ALLOWED_CSS_PROPERTIES,
    ALLOWED_PSEUDO_CLASSES,
    ALLOWED_PSEUDO_ELEMENTS,
    ALLOWED_PSEUDO_FUNCTIONS,
    ALLOWED_SELECTOR_LITERALS,
)
from .urls import call_collaborator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from typing import Protocol

    class UriChannel(Protocol):
        def rewrite_uri(self, value: str) -> str | None: ...

    RejectCallback = Callable[[str], None]
    UriRewriter = Callable[[str], str | None]

# @media inside @media inside ...
_MAX_RULE_NESTING = 4
_MAX_SELECTOR_NESTING = 4
# calc(((...))) and bare (((...))) in declaration values
_MAX_VALUE_NESTING = 32

_NTH_TOKEN_TYPES = (ast.WhitespaceToken, ast.IdentToken, ast.NumberToken, ast.DimensionToken)
_MEDIA_FEATURE_TOKEN_TYPES = (
    ast.WhitespaceToken,
    ast.IdentToken,
    ast.NumberToken,
    ast.DimensionToken,
    ast.PercentageToken,
)


def _reject(on_reject: RejectCallback | None, reason: str) -> None:
    if on_reject is not None:
        on_reject(reason)


def _normalized(tokens: Iterable[ast.Node]) -> list[ast.Node]:
    out: list[ast.Node] = []
    for token in tokens:
        if isinstance(token, ast.Comment):
            continue
        if isinstance(token, ast.WhitespaceToken):
            if out and isinstance(out[-1], ast.WhitespaceToken):
                continue
            token = ast.WhitespaceToken(token.source_line, token.source_column, " ")
        out.append(token)
    return out


def _serialize(tokens: Iterable[ast.Node]) -> str:
    return tinycss2.serialize(_normalized(tokens)).strip()


def _strip_whitespace(tokens: Sequence[ast.Node]) -> list[ast.Node]:
    tokens = [t for t in tokens if not isinstance(t, ast.Comment)]
    start, end = 0, len(tokens)
    while start < end and isinstance(tokens[start], ast.WhitespaceToken):
        start += 1
    while end > start and isinstance(tokens[end - 1], ast.WhitespaceToken):
        end -= 1
    return tokens[start:end]


def _split_commas(tokens: Sequence[ast.Node]) -> list[list[ast.Node]]:
    groups: list[list[ast.Node]] = [[]]
    for token in tokens:
        if isinstance(token, ast.LiteralToken) and token.value == ",":
            groups.append([])
        else:
            groups[-1].append(token)
    return [_strip_whitespace(group) for group in groups]


# -----------------
# Values
# -----------------


def _url_token(node: ast.Node, url: str) -> ast.URLToken:
    return ast.URLToken(node.source_line, node.source_column, url, f"url({serialize_url(url)})")


def _url_function_argument(function: ast.FunctionBlock) -> str | None:
    arguments = _strip_whitespace(function.arguments)
    if len(arguments) != 1 or not isinstance(arguments[0], ast.StringToken):
        return None
    return arguments[0].value


def _sanitize_values(
    tokens: Iterable[ast.Node], rewrite_uri: UriRewriter, depth: int = 0
) -> list[ast.Node] | None:
    """Return the sanitized component values, or None to reject them all."""
    out: list[ast.Node] = []
    for token in tokens:
        if isinstance(token, (ast.WhitespaceToken, ast.Comment)):
            out.append(token)
        elif isinstance(token, ast.URLToken):
            url = call_collaborator(rewrite_uri, token.value)
            if url is None:
                return None
            out.append(_url_token(token, url))
        elif isinstance(token, ast.FunctionBlock):
            if token.lower_name == "url":
                raw_url = _url_function_argument(token)
                url = None if raw_url is None else call_collaborator(rewrite_uri, raw_url)
                if url is None:
                    return None
                out.append(_url_token(token, url))
                continue
            if token.lower_name not in ALLOWED_CSS_FUNCTIONS or depth >= _MAX_VALUE_NESTING:
                return None
            arguments = _sanitize_values(token.arguments, rewrite_uri, depth + 1)
            if arguments is None:
                return None
            out.append(ast.FunctionBlock(token.source_line, token.source_column, token.name, arguments))
        elif isinstance(token, ast.ParenthesesBlock):
            if depth >= _MAX_VALUE_NESTING:
                return None
            content = _sanitize_values(token.content, rewrite_uri, depth + 1)
            if content is None:
                return None
            out.append(ast.ParenthesesBlock(token.source_line, token.source_column, content))
        elif isinstance(
            token,
            (ast.ParseError, ast.AtKeywordToken, ast.CurlyBracketsBlock, ast.SquareBracketsBlock),
        ):
            return None
        else:
            out.append(token)
    return out


def _sanitize_declaration(declaration: ast.Declaration, rewrite_uri: UriRewriter) -> str | None:
    name = declaration.lower_name
    if name not in ALLOWED_CSS_PROPERTIES:
        return None
    value = _sanitize_values(declaration.value, rewrite_uri)
    if value is None:
        return None
    text = _serialize(value)
    if not text or "<" in text:
        return None
    if declaration.important:
        text += " !important"
    return f"{name}: {text}"


def _filter_declarations(
    nodes: Iterable[ast.Node], rewrite_uri: UriRewriter, on_reject: RejectCallback | None
) -> list[str]:
    kept: list[str] = []
    for node in nodes:
        if isinstance(node, ast.Declaration):
            text = _sanitize_declaration(node, rewrite_uri)
            if text is None:
                _reject(on_reject, f"CSS declaration '{node.lower_name}' removed")
            else:
                kept.append(text)
        elif isinstance(node, ast.ParseError):
            _reject(on_reject, f"Malformed CSS declaration removed ({node.kind})")
        elif isinstance(node, (ast.QualifiedRule, ast.AtRule)):
            _reject(on_reject, "Nested CSS rule removed")
    return kept


def sanitize_declarations(
    css_text: str, rewrite_uri: UriRewriter, *, on_reject: RejectCallback | None = None
) -> str:
    """Sanitize a declaration list, as found in a style attribute."""
    nodes = tinycss2.parse_blocks_contents(css_text, skip_comments=True, skip_whitespace=True)
    return "; ".join(_filter_declarations(nodes, rewrite_uri, on_reject))


# -----------------
# Selectors
# -----------------


def _nth_arguments_allowed(arguments: Sequence[ast.Node]) -> bool:
    tokens = _strip_whitespace(arguments)
    if not tokens:
        return False
    for token in tokens:
        if isinstance(token, _NTH_TOKEN_TYPES):
            continue
        if isinstance(token, ast.LiteralToken) and token.value in {"+", "-"}:
            continue
        return False
    return True


def _pseudo_function_allowed(function: ast.FunctionBlock, depth: int) -> bool:
    name = function.lower_name
    if name not in ALLOWED_PSEUDO_FUNCTIONS:
        return False
    if name == "not":
        if depth >= _MAX_SELECTOR_NESTING:
            return False
        return all(_selector_allowed(part, depth + 1) for part in _split_commas(function.arguments))
    return _nth_arguments_allowed(function.arguments)


def _attribute_selector_allowed(content: Sequence[ast.Node]) -> bool:
    tokens = _strip_whitespace(content)
    if not tokens or not isinstance(tokens[0], ast.IdentToken):
        return False
    for token in tokens:
        if isinstance(token, (ast.WhitespaceToken, ast.IdentToken, ast.StringToken)):
            continue
        if isinstance(token, ast.LiteralToken) and token.value in ALLOWED_ATTRIBUTE_SELECTOR_LITERALS:
            continue
        return False
    return True


def _is_colon(token: ast.Node | None) -> bool:
    return isinstance(token, ast.LiteralToken) and token.value == ":"


def _selector_allowed(tokens: Sequence[ast.Node], depth: int = 0) -> bool:
    if not tokens:
        return False
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if isinstance(token, (ast.WhitespaceToken, ast.IdentToken, ast.HashToken)):
            i += 1
        elif _is_colon(token):
            following = tokens[i + 1] if i + 1 < len(tokens) else None
            if _is_colon(following):
                # ::pseudo-element
                name = tokens[i + 2] if i + 2 < len(tokens) else None
                if not isinstance(name, ast.IdentToken) or name.lower_value not in ALLOWED_PSEUDO_ELEMENTS:
                    return False
                i += 3
            elif isinstance(following, ast.IdentToken):
                # Legacy single-colon pseudo-elements are accepted too.
                if following.lower_value not in ALLOWED_PSEUDO_CLASSES | ALLOWED_PSEUDO_ELEMENTS:
                    return False
                i += 2
            elif isinstance(following, ast.FunctionBlock):
                if not _pseudo_function_allowed(following, depth):
                    return False
                i += 2
            else:
                return False
        elif isinstance(token, ast.LiteralToken):
            if token.value not in ALLOWED_SELECTOR_LITERALS:
                return False
            i += 1
        elif isinstance(token, ast.SquareBracketsBlock):
            if not _attribute_selector_allowed(token.content):
                return False
            i += 1
        else:
            return False
    return True


# -----------------
# Rules
# -----------------


def _media_query_allowed(prelude: Sequence[ast.Node]) -> bool:
    tokens = _strip_whitespace(prelude)
    if not tokens:
        return False
    for token in tokens:
        if isinstance(token, (ast.WhitespaceToken, ast.IdentToken)):
            continue
        if isinstance(token, ast.LiteralToken) and token.value == ",":
            continue
        if isinstance(token, ast.ParenthesesBlock):
            for inner in token.content:
                if isinstance(inner, _MEDIA_FEATURE_TOKEN_TYPES):
                    continue
                if isinstance(inner, ast.LiteralToken) and inner.value in {":", "/"}:
                    continue
                return False
            continue
        return False
    return True


def _sanitize_qualified_rule(
    rule: ast.QualifiedRule, rewrite_uri: UriRewriter, on_reject: RejectCallback | None
) -> str | None:
    selectors: list[str] = []
    for selector in _split_commas(rule.prelude):
        text = _serialize(selector) if _selector_allowed(selector) else None
        if text is not None and "<" not in text:
            selectors.append(text)
        else:
            _reject(on_reject, "CSS selector removed")
    if not selectors:
        return None

    nodes = tinycss2.parse_blocks_contents(rule.content, skip_comments=True, skip_whitespace=True)
    declarations = _filter_declarations(nodes, rewrite_uri, on_reject)
    if not declarations:
        return None
    return f"{', '.join(selectors)} {{ {'; '.join(declarations)} }}"


def _sanitize_at_rule(
    rule: ast.AtRule, rewrite_uri: UriRewriter, on_reject: RejectCallback | None, depth: int
) -> str | None:
    keyword = rule.lower_at_keyword
    if keyword != "media" or rule.content is None:
        _reject(on_reject, f"CSS at-rule '@{keyword}' removed")
        return None
    prelude = _serialize(rule.prelude) if _media_query_allowed(rule.prelude) else None
    if prelude is None or "<" in prelude:
        _reject(on_reject, "CSS media query removed")
        return None
    if depth >= _MAX_RULE_NESTING:
        _reject(on_reject, "CSS rules nested too deeply")
        return None

    nodes = tinycss2.parse_rule_list(rule.content, skip_comments=True, skip_whitespace=True)
    inner = _sanitize_rules(nodes, rewrite_uri, on_reject, depth + 1)
    if not inner:
        return None
    body = "\n".join(inner)
    return f"@media {prelude} {{\n{body}\n}}"


def _sanitize_rules(
    nodes: Iterable[ast.Node], rewrite_uri: UriRewriter, on_reject: RejectCallback | None, depth: int
) -> list[str]:
    out: list[str] = []
    for node in nodes:
        if isinstance(node, ast.QualifiedRule):
            text = _sanitize_qualified_rule(node, rewrite_uri, on_reject)
        elif isinstance(node, ast.AtRule):
            text = _sanitize_at_rule(node, rewrite_uri, on_reject, depth)
        elif isinstance(node, ast.ParseError):
            _reject(on_reject, f"Malformed CSS rule removed ({node.kind})")
            continue
        else:
            continue
        if text:
            out.append(text)
    return out


def sanitize_css(css_text: str, tag_policy: UriChannel, *, on_reject: RejectCallback | None = None) -> str:
    """Return `css_text` reduced to allow-listed rules, selectors and declarations.

    URLs inside the stylesheet are resolved through `tag_policy.rewrite_uri`;
    a declaration whose URL is rejected is dropped. `on_reject(reason)` is
    called once per dropped unit.
    """
    nodes = tinycss2.parse_stylesheet(css_text, skip_comments=True, skip_whitespace=True)
    return "\n".join(_sanitize_rules(nodes, tag_policy.rewrite_uri, on_reject, 0))
