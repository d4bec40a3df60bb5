from .constants import ATTRIBS, ELEMENTS
from .css import sanitize_css, sanitize_declarations
from .flags import AType, ChangeKind, EFlags, PolicyMode
from .parser import ParseError, parse_fragment
from .policy import Keep, Reject, RemovalEvent, TagPolicy
from .sanitize import (
    DEFAULT_POLICY,
    SanitizationPolicy,
    SanitizationResult,
    is_safe,
    sanitize,
    sanitize_html,
    sanitize_style_elements,
    sanitize_tree,
)
from .schema import DEFAULT_SCHEMA, ElementSchema, SchemaError
from .serialize import to_html
from .urls import UrlRule, keep_token
from .verify import is_equivalent_structure

__all__ = [
    "ATTRIBS",
    "DEFAULT_POLICY",
    "DEFAULT_SCHEMA",
    "ELEMENTS",
    "AType",
    "ChangeKind",
    "EFlags",
    "ElementSchema",
    "Keep",
    "ParseError",
    "PolicyMode",
    "Reject",
    "RemovalEvent",
    "SanitizationPolicy",
    "SanitizationResult",
    "SchemaError",
    "TagPolicy",
    "UrlRule",
    "is_equivalent_structure",
    "is_safe",
    "keep_token",
    "parse_fragment",
    "sanitize",
    "sanitize_css",
    "sanitize_declarations",
    "sanitize_html",
    "sanitize_style_elements",
    "sanitize_tree",
    "to_html",
]
