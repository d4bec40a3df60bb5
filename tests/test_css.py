from __future__ import annotations

import unittest

from scrubhtml.css import sanitize_css, sanitize_declarations
from scrubhtml.flags import PolicyMode
from scrubhtml.sanitize import DEFAULT_POLICY
from scrubhtml.urls import DEFAULT_URL_RULE


def _policy():
    return DEFAULT_POLICY.tag_policy(PolicyMode.ALLOW_CSS)


class TestSanitizeDeclarations(unittest.TestCase):
    def test_allowed_properties_are_kept(self) -> None:
        assert sanitize_declarations("color:red", DEFAULT_URL_RULE) == "color: red"
        assert sanitize_declarations("color: red; text-align: center;", DEFAULT_URL_RULE) == (
            "color: red; text-align: center"
        )

    def test_unknown_properties_are_dropped(self) -> None:
        reasons: list[str] = []
        out = sanitize_declarations("behavior: url(x.htc); color: red", DEFAULT_URL_RULE, on_reject=reasons.append)
        assert out == "color: red"
        assert len(reasons) == 1
        assert "behavior" in reasons[0]

    def test_property_names_are_lowercased(self) -> None:
        assert sanitize_declarations("COLOR: red", DEFAULT_URL_RULE) == "color: red"

    def test_important_is_preserved(self) -> None:
        assert sanitize_declarations("color: red !important", DEFAULT_URL_RULE) == "color: red !important"

    def test_disallowed_functions(self) -> None:
        assert sanitize_declarations("width: expression(alert(1))", DEFAULT_URL_RULE) == ""
        assert sanitize_declarations("color: rgb(1, 2, 3)", DEFAULT_URL_RULE) == "color: rgb(1, 2, 3)"

    def test_nested_disallowed_function(self) -> None:
        assert sanitize_declarations("width: calc(1px + attr(x))", DEFAULT_URL_RULE) == ""

    def test_urls_go_through_the_rewriter(self) -> None:
        assert sanitize_declarations("background-image: url(javascript:alert)", DEFAULT_URL_RULE) == ""
        assert sanitize_declarations("background-image: url('/a.png')", DEFAULT_URL_RULE) == (
            "background-image: url(/a.png)"
        )
        assert sanitize_declarations('background-image: url("https://example.com/a.png")', DEFAULT_URL_RULE) == (
            "background-image: url(https://example.com/a.png)"
        )

    def test_rewritten_url_is_substituted(self) -> None:
        out = sanitize_declarations("background-image: url(/a.png)", lambda url: "/proxy" + url)
        assert out == "background-image: url(/proxy/a.png)"

    def test_failing_rewriter_drops_declaration(self) -> None:
        def broken(url: str) -> str:
            raise RuntimeError("boom")

        with self.assertLogs("scrubhtml.urls", level="WARNING"):
            out = sanitize_declarations("background-image: url(/a.png); color: red", broken)
        assert out == "color: red"

    def test_markup_in_values_is_rejected(self) -> None:
        assert sanitize_declarations("font-family: '</style><script>'", DEFAULT_URL_RULE) == ""

    def test_blocks_and_at_keywords_are_rejected(self) -> None:
        assert sanitize_declarations("color: {red}", DEFAULT_URL_RULE) == ""
        assert sanitize_declarations("color: @red", DEFAULT_URL_RULE) == ""

    def test_garbage_is_dropped_not_raised(self) -> None:
        reasons: list[str] = []
        out = sanitize_declarations("color red; ;; margin: 0", DEFAULT_URL_RULE, on_reject=reasons.append)
        assert out == "margin: 0"
        assert reasons

    def test_deeply_nested_values_are_dropped(self) -> None:
        reasons: list[str] = []
        css = "color: " + "(" * 5000 + "; margin: 0"
        assert sanitize_declarations(css, DEFAULT_URL_RULE, on_reject=reasons.append) == ""
        assert reasons == ["CSS declaration 'color' removed"]
        assert sanitize_declarations("width: " + "calc(" * 5000 + "1px", DEFAULT_URL_RULE) == ""

    def test_moderately_nested_values_are_kept(self) -> None:
        css = "width: calc(" + "(" * 5 + "1px + 2px" + ")" * 5 + ")"
        assert sanitize_declarations(css, DEFAULT_URL_RULE) == css


class TestSanitizeStylesheet(unittest.TestCase):
    def test_simple_rule(self) -> None:
        assert sanitize_css("p{color:red}", _policy()) == "p { color: red }"

    def test_output_is_stable(self) -> None:
        css = "a:hover, .note > b { color: blue; margin: 0 }\n@media screen { p { color: red } }"
        once = sanitize_css(css, _policy())
        assert sanitize_css(once, _policy()) == once

    def test_selector_list_is_filtered_per_selector(self) -> None:
        reasons: list[str] = []
        out = sanitize_css("a:visited, p.x { color: red }", _policy(), on_reject=reasons.append)
        assert out == "p.x { color: red }"
        assert len(reasons) == 1

    def test_rule_without_selectors_is_dropped(self) -> None:
        assert sanitize_css("a:visited { color: red }", _policy()) == ""

    def test_rule_without_declarations_is_dropped(self) -> None:
        assert sanitize_css("p { behavior: url(x.htc) }", _policy()) == ""

    def test_selector_features(self) -> None:
        assert sanitize_css("#main .x > p + b ~ i { color: red }", _policy()) == "#main .x > p + b ~ i { color: red }"
        assert sanitize_css('a[title="x"] { color: red }', _policy()) == 'a[title="x"] { color: red }'
        assert sanitize_css("li:nth-child(odd) { color: red }", _policy()) == "li:nth-child(odd) { color: red }"
        assert sanitize_css("li:nth-of-type(3) { color: red }", _policy()) == "li:nth-of-type(3) { color: red }"
        assert sanitize_css("p:not(.x) { color: red }", _policy()) == "p:not(.x) { color: red }"
        assert sanitize_css("p::first-line { color: red }", _policy()) == "p::first-line { color: red }"

    def test_disallowed_selectors(self) -> None:
        for css in [
            "p:not(a:visited) { color: red }",
            "p::before { color: red }",
            "p:has(b) { color: red }",
            "'p' { color: red }",
            "a[href=url(x)] { color: red }",
        ]:
            with self.subTest(css=css):
                assert sanitize_css(css, _policy()) == ""

    def test_at_rules(self) -> None:
        assert sanitize_css("@import url(evil.css); p { color: red }", _policy()) == "p { color: red }"
        assert sanitize_css("@font-face { font-family: x; src: url(x.woff) }", _policy()) == ""
        assert sanitize_css("@media screen and (max-width: 600px) { p { color: red } }", _policy()) == (
            "@media screen and (max-width: 600px) {\np { color: red }\n}"
        )

    def test_media_rule_is_sanitized_recursively(self) -> None:
        assert sanitize_css("@media print { script:visited { color: red } }", _policy()) == ""

    def test_urls_use_the_tag_policy(self) -> None:
        css = "body { background: url(javascript:evil()) }"
        out = sanitize_css(css, _policy())
        assert "url(" not in out
        assert out == ""

    def test_deeply_nested_input_is_dropped(self) -> None:
        for css in [
            "a{color:" + "(" * 5000 + "}",
            "p" + "(" * 5000 + ")" * 5000 + "{color:red}",
            "@media " + "(" * 5000 + ")" * 5000 + "{p{color:red}}",
            "(" * 5000 + "{color:red}",
        ]:
            with self.subTest(css=css[:20]):
                assert sanitize_css(css, _policy()) == ""

    def test_rejected_selector_reason(self) -> None:
        reasons: list[str] = []
        assert sanitize_css("p:has(b), a { color: red }", _policy(), on_reject=reasons.append) == "a { color: red }"
        assert reasons == ["CSS selector removed"]

    def test_comments_are_removed(self) -> None:
        assert sanitize_css("/* x */ p { /* y */ color: red }", _policy()) == "p { color: red }"


if __name__ == "__main__":
    unittest.main()
