from __future__ import annotations

import unittest

from scrubhtml.urls import DEFAULT_URL_RULE, UrlRule, call_collaborator, keep_token


class TestUrlRule(unittest.TestCase):
    def test_inputs_are_normalized(self) -> None:
        rule = UrlRule(allowed_schemes=["HTTPS"], allowed_hosts=["Example.COM"])
        assert rule.allowed_schemes == frozenset({"https"})
        assert rule.allowed_hosts == frozenset({"example.com"})

    def test_default_schemes(self) -> None:
        assert DEFAULT_URL_RULE("https://example.com/a") == "https://example.com/a"
        assert DEFAULT_URL_RULE("http://example.com/") == "http://example.com/"
        assert DEFAULT_URL_RULE("mailto:someone@example.com") == "mailto:someone@example.com"
        assert DEFAULT_URL_RULE("javascript:alert(1)") is None
        assert DEFAULT_URL_RULE("JavaScript:alert(1)") is None
        assert DEFAULT_URL_RULE("data:text/html,<b>x</b>") is None
        assert DEFAULT_URL_RULE("vbscript:msgbox(1)") is None

    def test_obfuscated_schemes_are_detected(self) -> None:
        assert DEFAULT_URL_RULE("java\tscript:alert(1)") is None
        assert DEFAULT_URL_RULE(" \njavascript:alert(1)") is None
        assert DEFAULT_URL_RULE("java\x00script:alert(1)") is None

    def test_relative_and_fragment(self) -> None:
        assert DEFAULT_URL_RULE("/path?q=1") == "/path?q=1"
        assert DEFAULT_URL_RULE("../up") == "../up"
        assert DEFAULT_URL_RULE("#top") == "#top"
        assert UrlRule(allow_relative=False)("/path") is None
        assert UrlRule(allow_fragment=False)("#top") is None

    def test_surrounding_whitespace_is_stripped(self) -> None:
        assert DEFAULT_URL_RULE("  https://example.com  ") == "https://example.com"

    def test_protocol_relative(self) -> None:
        assert DEFAULT_URL_RULE("//evil.example/x") is None
        assert DEFAULT_URL_RULE("\\\\evil.example/x") is None
        rule = UrlRule(allow_protocol_relative=True)
        assert rule("//cdn.example/x") == "//cdn.example/x"

    def test_host_allowlist(self) -> None:
        rule = UrlRule(allowed_hosts=["example.com"], allow_protocol_relative=True)
        assert rule("https://example.com/x") == "https://example.com/x"
        assert rule("https://EXAMPLE.com/x") == "https://EXAMPLE.com/x"
        assert rule("https://evil.example/x") is None
        assert rule("//evil.example/x") is None
        assert rule("mailto:a@example.org") == "mailto:a@example.org"
        assert rule("/relative") == "/relative"

    def test_no_schemes_allowed(self) -> None:
        rule = UrlRule(allowed_schemes=[])
        assert rule("https://example.com") is None
        assert rule("image.png") == "image.png"


class TestCollaborators(unittest.TestCase):
    def test_keep_token(self) -> None:
        assert keep_token("abc") == "abc"

    def test_call_collaborator_passes_results(self) -> None:
        assert call_collaborator(str.upper, "abc") == "ABC"
        assert call_collaborator(lambda value: None, "abc") is None

    def test_call_collaborator_rejects_on_error(self) -> None:
        def broken(value: str) -> str:
            raise RuntimeError("boom")

        with self.assertLogs("scrubhtml.urls", level="WARNING") as logs:
            assert call_collaborator(broken, "abc") is None
        assert "rejecting value" in logs.output[0]

    def test_call_collaborator_rejects_non_text(self) -> None:
        with self.assertLogs("scrubhtml.urls", level="WARNING"):
            assert call_collaborator(lambda value: 42, "abc") is None


if __name__ == "__main__":
    unittest.main()
