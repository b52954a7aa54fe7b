"""Tests for rule cascades and the non-raising comparison helpers."""

from __future__ import annotations

import math

import pytest

from meditrack.domains.insights.domain_logic.rules import (
    Rule,
    between,
    first_match,
    ge,
    gt,
    le,
    lt,
    num,
    num_or,
)


class TestNum:
    @pytest.mark.parametrize("value, expected", [
        (72, 72.0),
        (5.5, 5.5),
        (0, 0.0),
        (-3, -3.0),
    ])
    def test_real_numbers(self, value, expected):
        assert num(value) == expected

    @pytest.mark.parametrize("value", [
        "72", None, True, False, [72], {"v": 1}, math.nan, math.inf, -math.inf,
    ])
    def test_non_numbers_return_none(self, value):
        assert num(value) is None

    def test_num_or_default(self):
        assert num_or(None) == 0.0
        assert num_or("abc", 5) == 5
        assert num_or(12) == 12.0


class TestComparisons:
    def test_between_is_inclusive(self):
        assert between(60, 60, 80)
        assert between(80, 60, 80)
        assert not between(80.1, 60, 80)
        assert not between(59.9, 60, 80)

    def test_strict_and_inclusive_bounds(self):
        assert gt(101, 100) and not gt(100, 100)
        assert ge(100, 100)
        assert lt(5.9, 6) and not lt(6, 6)
        assert le(3, 3)

    @pytest.mark.parametrize("helper", [gt, ge, lt, le])
    def test_non_numeric_is_false(self, helper):
        assert helper("high", 5) is False
        assert helper(None, 5) is False
        assert helper(math.nan, 5) is False

    def test_between_non_numeric_is_false(self):
        assert between("70", 60, 80) is False


class TestFirstMatch:
    def test_first_matching_rule_wins(self):
        rules = [
            Rule("a", lambda m: m["x"] > 10),
            Rule("b", lambda m: m["x"] > 5),
            Rule("c", lambda m: m["x"] > 0),
        ]
        assert first_match(rules, {"x": 20}, "z") == "a"
        assert first_match(rules, {"x": 7}, "z") == "b"

    def test_later_rules_not_consulted(self):
        calls: list[str] = []

        def track(name: str, result: bool):
            def predicate(_m):
                calls.append(name)
                return result
            return predicate

        rules = [Rule("a", track("a", False)), Rule("b", track("b", True)), Rule("c", track("c", True))]
        assert first_match(rules, {}, "z") == "b"
        assert calls == ["a", "b"]

    def test_default_when_nothing_matches(self):
        assert first_match([Rule("a", lambda m: False)], {}, "fair") == "fair"
        assert first_match([], {}, "fair") == "fair"
