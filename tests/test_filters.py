"""Tests for ignore rules: literal and pattern matching, type-name fallback."""

import re

import pytest

from bugcatch.filters import ErrorFilter, IgnoreRule, match_subject


class ConnectionTrouble(Exception):
    pass


class TestIgnoreRule:
    def test_literal_matches_exact_message(self):
        assert IgnoreRule.literal("Connection refused").matches("Connection refused")

    def test_literal_escapes_regex_metacharacters(self):
        rule = IgnoreRule.literal("value (x) *")
        assert rule.matches("bad value (x) * here")
        assert not rule.matches("value x")

    def test_pattern_uses_search(self):
        rule = IgnoreRule.pattern(r"Timeout.*")
        assert rule.matches("Read Timeout after 5s")
        assert not rule.matches("timed out")

    def test_pattern_accepts_compiled_regex(self):
        rule = IgnoreRule.pattern(re.compile(r"^boom$", re.IGNORECASE))
        assert rule.matches("BOOM")

    def test_coerce(self):
        assert IgnoreRule.coerce("x").is_literal
        assert not IgnoreRule.coerce(re.compile("x")).is_literal
        rule = IgnoreRule.literal("y")
        assert IgnoreRule.coerce(rule) is rule
        with pytest.raises(TypeError):
            IgnoreRule.coerce(42)

    def test_equality(self):
        assert IgnoreRule.literal("a") == IgnoreRule.literal("a")
        assert IgnoreRule.literal("a") != IgnoreRule.pattern("a")


class TestErrorFilter:
    def test_no_rules_never_ignores(self):
        assert ErrorFilter().should_ignore(RuntimeError("anything")) is False

    def test_literal_rule_drops_matching_message(self):
        f = ErrorFilter([IgnoreRule.literal("Connection refused")])
        assert f.should_ignore(RuntimeError("Connection refused"))

    def test_non_matching_rule_keeps(self):
        f = ErrorFilter([IgnoreRule.literal("Connection refused")])
        assert not f.should_ignore(RuntimeError("NullPointerException"))

    def test_pattern_matches_type_name_when_message_empty(self):
        f = ErrorFilter([IgnoreRule.pattern(r"ConnectionTrouble$")])
        assert f.should_ignore(ConnectionTrouble())
        assert not f.should_ignore(ConnectionTrouble("with a message"))

    def test_any_rule_matching_is_enough(self):
        f = ErrorFilter([IgnoreRule.literal("nope"), IgnoreRule.pattern("ba+d")])
        assert f.should_ignore(ValueError("baaad input"))

    def test_match_subject(self):
        assert match_subject(ValueError("msg")) == "msg"
        assert match_subject(ValueError()) == "ValueError"
