"""Wellness score: share of assessed categories at a favorable tier.

Categories without an assessment (insufficient data) are left out of both
numerator and denominator. The percentage is rounded half-up, so 2 of 3
favorable scores 67 and 1 of 8 (12.5) scores 13.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterable, Mapping

from meditrack.domains.insights.domain_logic.models import HealthInsight
from meditrack.domains.insights.reference.thresholds import FAVORABLE_TIERS


def round_half_up(value: Fraction | float) -> int:
    return math.floor(Fraction(value) + Fraction(1, 2))


def score(tier_assessments: Mapping[str, str | None]) -> int:
    """Return the 0-100 wellness score for a category -> tier mapping.

    A ``None`` tier means the category produced no insight. With no assessed
    categories at all the score is 0.
    """
    assessed = [tier for tier in tier_assessments.values() if tier is not None]
    if not assessed:
        return 0
    favorable = sum(1 for tier in assessed if tier in FAVORABLE_TIERS)
    return round_half_up(Fraction(favorable * 100, len(assessed)))


def tiers_from_insights(
    insights: Iterable[HealthInsight],
    categories: Iterable[str],
) -> dict[str, str | None]:
    """Build the tier mapping for ``score`` from a full (untruncated) insight list."""
    by_id = {insight.id: insight.tier for insight in insights}
    return {category: by_id.get(category) for category in categories}
