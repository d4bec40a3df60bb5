"""Validated, immutable element/attribute schema.

`ElementSchema` is built once from the raw tables in `scrubhtml.constants`.
Construction validates the tables (bad entries raise `SchemaError` here,
never while sanitizing) and precomputes one read-only `SchemaView` per
`PolicyMode`. Sanitizing never mutates a schema: selecting a mode means
selecting a view.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .constants import ATTRIBS, DEFAULT_TRUSTED_ATTRIBUTE_PREFIXES, ELEMENTS, VOID_ELEMENTS
from .flags import AType, EFlags, PolicyMode

_ALL_EFLAGS = sum(int(flag) for flag in EFlags)

_TEXT_CONTENT_FLAGS = EFlags.CDATA | EFlags.RCDATA


class SchemaError(ValueError):
    """Raised when an element/attribute table is inconsistent."""


@dataclass(frozen=True, slots=True)
class SchemaView:
    """The tables as seen by one sanitize() call in one PolicyMode."""

    mode: PolicyMode
    elements: Mapping[str, EFlags]
    attributes: Mapping[str, AType]
    trusted_attribute_pattern: re.Pattern[str] | None = None

    def element_flags(self, tag_name: str) -> EFlags | None:
        return self.elements.get(tag_name.lower())

    def is_unsafe(self, tag_name: str) -> bool:
        # Unknown tags fail closed.
        flags = self.element_flags(tag_name)
        return flags is None or bool(flags & EFlags.UNSAFE)

    def attribute_type(self, tag_name: str, attr_name: str) -> AType | None:
        tag = tag_name.lower()
        name = attr_name.lower()
        atype = self.attributes.get(f"{tag}::{name}")
        if atype is None:
            atype = self.attributes.get(f"*::{name}")
        if atype is None and self.trusted_attribute_pattern is not None:
            if self.trusted_attribute_pattern.match(name):
                atype = AType.NONE
        return atype


def _coerce_flags(tag: str, flags: object) -> EFlags:
    if isinstance(flags, bool) or not isinstance(flags, int):
        raise SchemaError(f"Element {tag!r}: flags must be EFlags, got {flags!r}")
    if int(flags) & ~_ALL_EFLAGS:
        raise SchemaError(f"Element {tag!r}: unknown flag bits in {int(flags)}")
    return EFlags(int(flags))


def _validate_elements(elements: Mapping[str, object]) -> dict[str, EFlags]:
    out: dict[str, EFlags] = {}
    for tag, raw_flags in elements.items():
        if not isinstance(tag, str) or not tag or tag != tag.lower() or "::" in tag or tag == "*":
            raise SchemaError(f"Invalid element name: {tag!r}")
        flags = _coerce_flags(tag, raw_flags)
        if flags & EFlags.CDATA and flags & EFlags.RCDATA:
            raise SchemaError(f"Element {tag!r}: CDATA and RCDATA are exclusive")
        if flags & EFlags.EMPTY and flags & _TEXT_CONTENT_FLAGS:
            raise SchemaError(f"Element {tag!r}: EMPTY element cannot have text content")
        if flags & EFlags.EMPTY and tag not in VOID_ELEMENTS:
            raise SchemaError(f"Element {tag!r}: marked EMPTY but is not a void element")
        if flags & EFlags.UNSAFE and flags & EFlags.FOLDABLE:
            raise SchemaError(f"Element {tag!r}: UNSAFE and FOLDABLE are exclusive")
        out[tag] = flags
    return out


def _validate_attributes(attributes: Mapping[str, object], elements: Mapping[str, EFlags]) -> dict[str, AType]:
    out: dict[str, AType] = {}
    for key, raw_type in attributes.items():
        if not isinstance(key, str) or key != key.lower():
            raise SchemaError(f"Invalid attribute key: {key!r}")
        tag, sep, name = key.partition("::")
        if not sep or not tag or not name or "::" in name:
            raise SchemaError(f"Attribute key must look like 'tag::name' or '*::name', got {key!r}")
        if tag != "*" and tag not in elements:
            raise SchemaError(f"Attribute {key!r} refers to unknown element {tag!r}")
        if isinstance(raw_type, AType):
            atype = raw_type
        else:
            try:
                atype = AType(raw_type)
            except ValueError:
                raise SchemaError(f"Attribute {key!r}: unknown value class {raw_type!r}") from None
        out[key] = atype
    return out


def _compile_prefixes(prefixes: tuple[str, ...]) -> re.Pattern[str] | None:
    for prefix in prefixes:
        if not isinstance(prefix, str) or not prefix or prefix != prefix.lower():
            raise SchemaError(f"Invalid trusted attribute prefix: {prefix!r}")
    if not prefixes:
        return None
    alternatives = "|".join(re.escape(p) for p in prefixes)
    return re.compile(rf"^(?:{alternatives})[a-z0-9_.\-]+$")


def _mode_view(
    mode: PolicyMode,
    elements: dict[str, EFlags],
    attributes: dict[str, AType],
    pattern: re.Pattern[str] | None,
) -> SchemaView:
    elements = dict(elements)
    attributes = dict(attributes)
    style_flags = elements.get("style", EFlags.CDATA)
    if mode is PolicyMode.ALLOW_CSS:
        elements["style"] = EFlags(int(style_flags) & ~int(EFlags.UNSAFE))
        style_type = AType.STYLE
    else:
        elements["style"] = style_flags | EFlags.UNSAFE
        style_type = AType.SCRIPT

    attributes["*::style"] = style_type
    for key in list(attributes):
        if key.endswith("::style"):
            attributes[key] = style_type

    return SchemaView(
        mode=mode,
        elements=MappingProxyType(elements),
        attributes=MappingProxyType(attributes),
        trusted_attribute_pattern=pattern,
    )


@dataclass(frozen=True, slots=True)
class ElementSchema:
    """Allow-list tables for elements and attributes.

    - Elements missing from `elements`, or flagged UNSAFE, are rejected.
    - Attributes are looked up as "<tag>::<name>", then "*::<name>". Names
      starting with one of `trusted_attribute_prefixes` (e.g. "data-") are
      allowed with value class NONE when no explicit entry exists.
    - The `style` element and `style` attributes are governed by the
      PolicyMode of each call, not by the baseline tables.
    """

    elements: Mapping[str, EFlags] = field(default_factory=lambda: ELEMENTS)
    attributes: Mapping[str, AType] = field(default_factory=lambda: ATTRIBS)
    trusted_attribute_prefixes: tuple[str, ...] = DEFAULT_TRUSTED_ATTRIBUTE_PREFIXES
    _views: Mapping[PolicyMode, SchemaView] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        elements = _validate_elements(self.elements)
        attributes = _validate_attributes(self.attributes, elements)
        prefixes = tuple(self.trusted_attribute_prefixes)
        pattern = _compile_prefixes(prefixes)

        object.__setattr__(self, "elements", MappingProxyType(elements))
        object.__setattr__(self, "attributes", MappingProxyType(attributes))
        object.__setattr__(self, "trusted_attribute_prefixes", prefixes)
        object.__setattr__(
            self,
            "_views",
            MappingProxyType({mode: _mode_view(mode, elements, attributes, pattern) for mode in PolicyMode}),
        )

    def for_mode(self, mode: PolicyMode) -> SchemaView:
        return self._views[PolicyMode(mode)]

    def extend(
        self,
        *,
        elements: Mapping[str, object] | None = None,
        attributes: Mapping[str, object] | None = None,
        trusted_attribute_prefixes: Iterable[str] | None = None,
    ) -> ElementSchema:
        """Return a new schema with entries added or overridden."""
        merged_elements = dict(self.elements)
        merged_elements.update(elements or {})
        merged_attributes = dict(self.attributes)
        merged_attributes.update(attributes or {})
        prefixes = (
            self.trusted_attribute_prefixes
            if trusted_attribute_prefixes is None
            else tuple(trusted_attribute_prefixes)
        )
        return ElementSchema(
            elements=merged_elements,
            attributes=merged_attributes,
            trusted_attribute_prefixes=prefixes,
        )


DEFAULT_SCHEMA: ElementSchema = ElementSchema()
