"""Per-element keep/reject decisions and the events they produce."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .attributes import sanitize_attributes
from .flags import ChangeKind
from .urls import call_collaborator, keep_token

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .schema import SchemaView
    from .urls import TokenPolicy, UriRewriter

    EventCallback = Callable[["RemovalEvent"], None]


@dataclass(frozen=True, slots=True)
class RemovalEvent:
    """Something was removed from the input.

    `attr_name` is None for element-level events. `change` is
    `ChangeKind.CHANGED` when only part of an attribute value (or of a
    stylesheet) was removed.
    """

    tag_name: str
    attr_name: str | None
    reason: str
    change: ChangeKind = ChangeKind.REMOVED

    @property
    def key(self) -> str:
        if self.attr_name is None:
            return self.tag_name
        return f"{self.tag_name}::{self.attr_name}"

    def __str__(self) -> str:
        return f"{self.key} {self.change.value}: {self.reason}"


@dataclass(frozen=True, slots=True)
class Keep:
    attrs: tuple[tuple[str, str | None], ...]


@dataclass(frozen=True, slots=True)
class Reject:
    reason: str


def _discard(event: RemovalEvent) -> None:
    return None


@dataclass(frozen=True, slots=True)
class TagPolicy:
    """Decides, element by element, what survives sanitization.

    One instance serves one sanitize() call: the markup walk and the
    stylesheet pass share it, so they see the same mode and report into the
    same `on_event` sink.
    """

    schema: SchemaView
    uri_rewriter: UriRewriter
    token_policy: TokenPolicy
    on_event: EventCallback

    def __init__(
        self,
        schema: SchemaView,
        *,
        uri_rewriter: UriRewriter,
        token_policy: TokenPolicy = keep_token,
        on_event: EventCallback | None = None,
    ) -> None:
        object.__setattr__(self, "schema", schema)
        object.__setattr__(self, "uri_rewriter", uri_rewriter)
        object.__setattr__(self, "token_policy", token_policy)
        object.__setattr__(self, "on_event", on_event or _discard)

    def report(
        self,
        tag_name: str,
        reason: str,
        *,
        attr_name: str | None = None,
        change: ChangeKind = ChangeKind.REMOVED,
    ) -> None:
        self.on_event(RemovalEvent(tag_name, attr_name, reason, change))

    def decide(
        self,
        tag_name: str,
        raw_attrs: Mapping[str, str | None] | Iterable[tuple[str, str | None]] = (),
    ) -> Keep | Reject:
        tag = tag_name.lower()
        flags = self.schema.element_flags(tag)
        if flags is None:
            reason = "element not allowed"
        elif self.schema.is_unsafe(tag):
            reason = "unsafe element"
        else:
            attrs = sanitize_attributes(
                tag,
                raw_attrs,
                schema=self.schema,
                uri_rewriter=self.uri_rewriter,
                token_policy=self.token_policy,
                on_reject=lambda name, why, change: self.report(tag, why, attr_name=name, change=change),
            )
            return Keep(tuple(attrs))
        self.report(tag, reason)
        return Reject(reason)

    def rewrite_uri(self, value: str) -> str | None:
        """URI channel for URLs found outside attributes (CSS url())."""
        return call_collaborator(self.uri_rewriter, value)
