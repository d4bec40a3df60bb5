from __future__ import annotations

import unittest

from scrubhtml.flags import ChangeKind, PolicyMode
from scrubhtml.policy import Keep, Reject, RemovalEvent, TagPolicy
from scrubhtml.schema import DEFAULT_SCHEMA
from scrubhtml.urls import DEFAULT_URL_RULE


class TestRemovalEvent(unittest.TestCase):
    def test_key(self) -> None:
        assert RemovalEvent("script", None, "unsafe element").key == "script"
        assert RemovalEvent("a", "href", "URI rejected").key == "a::href"

    def test_str(self) -> None:
        event = RemovalEvent("p", "class", "1 part(s) of the value removed", ChangeKind.CHANGED)
        assert str(event) == "p::class changed: 1 part(s) of the value removed"

    def test_default_change_is_removed(self) -> None:
        assert RemovalEvent("x", None, "r").change is ChangeKind.REMOVED


class TestTagPolicy(unittest.TestCase):
    def setUp(self) -> None:
        self.events: list[RemovalEvent] = []
        self.policy = TagPolicy(
            DEFAULT_SCHEMA.for_mode(PolicyMode.ALLOW_CSS),
            uri_rewriter=DEFAULT_URL_RULE,
            on_event=self.events.append,
        )

    def test_unsafe_element_is_rejected(self) -> None:
        decision = self.policy.decide("SCRIPT", {"src": "x.js"})
        assert decision == Reject("unsafe element")
        assert self.events == [RemovalEvent("script", None, "unsafe element")]

    def test_unknown_element_is_rejected(self) -> None:
        assert self.policy.decide("blink") == Reject("element not allowed")
        assert self.events[0].key == "blink"

    def test_allowed_element_keeps_filtered_attributes(self) -> None:
        decision = self.policy.decide("a", {"href": "javascript:x", "title": "t"})
        assert decision == Keep((("title", "t"),))
        assert len(self.events) == 1
        assert self.events[0].key == "a::href"
        assert self.events[0].change is ChangeKind.REMOVED

    def test_clean_element_emits_nothing(self) -> None:
        assert self.policy.decide("b", {}) == Keep(())
        assert self.events == []

    def test_style_element_depends_on_mode(self) -> None:
        assert isinstance(self.policy.decide("style"), Keep)
        strict = TagPolicy(
            DEFAULT_SCHEMA.for_mode(PolicyMode.STRIP_CSS),
            uri_rewriter=DEFAULT_URL_RULE,
            on_event=self.events.append,
        )
        assert isinstance(strict.decide("style"), Reject)

    def test_rewrite_uri(self) -> None:
        assert self.policy.rewrite_uri("/ok.png") == "/ok.png"
        assert self.policy.rewrite_uri("javascript:x") is None

    def test_report(self) -> None:
        self.policy.report("style", "CSS selector removed", change=ChangeKind.CHANGED)
        assert self.events == [RemovalEvent("style", None, "CSS selector removed", ChangeKind.CHANGED)]

    def test_without_event_sink(self) -> None:
        policy = TagPolicy(DEFAULT_SCHEMA.for_mode(PolicyMode.ALLOW_CSS), uri_rewriter=DEFAULT_URL_RULE)
        assert policy.decide("script") == Reject("unsafe element")


if __name__ == "__main__":
    unittest.main()
