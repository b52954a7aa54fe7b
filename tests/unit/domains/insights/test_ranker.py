"""Tests for insight ranking and truncation."""

from __future__ import annotations

import pytest

from meditrack.domains.insights.domain_logic import ranker
from meditrack.domains.insights.domain_logic.models import HealthInsight


def _insight(id: str, priority: str, confidence: int = 80) -> HealthInsight:
    return HealthInsight(
        id=id,
        title=id,
        category="test",
        description="",
        severity="normal",
        recommendation="",
        actions=(),
        benefits="",
        confidence=confidence,
        priority=priority,
    )


class TestSelect:
    def test_priority_order_with_default_limit(self):
        insights = [
            _insight("a", "low"),
            _insight("b", "high"),
            _insight("c", "medium"),
            _insight("d", "high"),
            _insight("e", "low"),
        ]
        assert [i.id for i in ranker.select(insights)] == ["b", "d", "c"]

    def test_confidence_breaks_priority_ties(self):
        insights = [_insight("a", "high", 90), _insight("b", "high", 95)]
        assert [i.id for i in ranker.select(insights)] == ["b", "a"]

    def test_full_ties_keep_emission_order(self):
        insights = [_insight(name, "medium", 80) for name in "wxyz"]
        assert [i.id for i in ranker.select(insights, limit=10)] == list("wxyz")

    def test_limit_larger_than_input(self):
        insights = [_insight("a", "low"), _insight("b", "high")]
        assert [i.id for i in ranker.select(insights, limit=6)] == ["b", "a"]

    def test_zero_limit_returns_empty(self):
        assert ranker.select([_insight("a", "high")], limit=0) == []

    def test_negative_limit_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            ranker.select([_insight("a", "high")], limit=-1)

    def test_empty_input(self):
        assert ranker.select([]) == []

    def test_does_not_mutate_input(self):
        insights = [_insight("a", "low"), _insight("b", "high")]
        ranker.select(insights)
        assert [i.id for i in insights] == ["a", "b"]
