from __future__ import annotations

import json
import unittest
from pathlib import Path
from typing import Any

from scrubhtml import DEFAULT_POLICY, DEFAULT_SCHEMA, SanitizationPolicy, UrlRule, sanitize

_CASES_DIR = Path(__file__).with_name("scrubhtml-sanitize-tests")


def _build_policy(config: Any) -> SanitizationPolicy:
    if config == "DEFAULT":
        return DEFAULT_POLICY

    if not isinstance(config, dict):
        raise TypeError("policy must be 'DEFAULT' or an object")

    rule_config = config.get("url_rule", {})
    if not isinstance(rule_config, dict):
        raise TypeError("url_rule must be an object")
    url_rule = UrlRule(
        allow_relative=rule_config.get("allow_relative", True),
        allow_fragment=rule_config.get("allow_fragment", True),
        allow_protocol_relative=rule_config.get("allow_protocol_relative", False),
        allowed_schemes=rule_config.get("allowed_schemes", ["http", "https", "mailto"]),
        allowed_hosts=rule_config.get("allowed_hosts", None),
    )

    schema = DEFAULT_SCHEMA
    if "trusted_attribute_prefixes" in config:
        schema = schema.extend(trusted_attribute_prefixes=config["trusted_attribute_prefixes"])

    return SanitizationPolicy(
        schema=schema,
        url_rule=url_rule,
        max_depth=config.get("max_depth", DEFAULT_POLICY.max_depth),
    )


class TestSanitizeIntegration(unittest.TestCase):
    def test_sanitize_cases(self) -> None:
        cases_path = _CASES_DIR / "cases.json"
        cases = json.loads(cases_path.read_text(encoding="utf-8"))
        if not isinstance(cases, list):
            raise TypeError("cases.json must contain a list")

        for case in cases:
            name = case["name"]
            policy = _build_policy(case["policy"])
            input_html = case["input_html"]
            expected_html = case["expected_html"]

            result = sanitize(input_html, case.get("allow_css", True), policy=policy)
            actual = result.sanitized
            if actual != expected_html:
                self.fail(
                    "\n".join(
                        [
                            f"Case: {name}",
                            f"Input: {input_html}",
                            f"Expected: {expected_html}",
                            f"Actual:   {actual}",
                        ]
                    )
                )

            expected_safe = case.get("maybe_safe")
            if expected_safe is not None and result.maybe_safe != expected_safe:
                events = ", ".join(str(event) for event in result.events) or "none"
                self.fail(f"Case: {name}\nExpected maybe_safe={expected_safe}, events: {events}")

    def test_cases_are_idempotent(self) -> None:
        cases = json.loads((_CASES_DIR / "cases.json").read_text(encoding="utf-8"))
        for case in cases:
            policy = _build_policy(case["policy"])
            allow_css = case.get("allow_css", True)
            once = sanitize(case["input_html"], allow_css, policy=policy).sanitized
            twice = sanitize(once, allow_css, policy=policy).sanitized
            if once != twice:
                self.fail(f"Case: {case['name']}\nFirst:  {once}\nSecond: {twice}")


if __name__ == "__main__":
    unittest.main()
