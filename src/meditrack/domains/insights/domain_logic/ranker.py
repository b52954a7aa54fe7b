"""Insight ranking and top-N selection."""

from __future__ import annotations

from typing import Iterable

from meditrack.domains.insights.domain_logic.models import HealthInsight
from meditrack.domains.insights.reference.thresholds import PRIORITY_WEIGHT

DEFAULT_LIMIT = 3


def select(insights: Iterable[HealthInsight], limit: int = DEFAULT_LIMIT) -> list[HealthInsight]:
    """Order insights by priority then confidence (both descending) and truncate.

    ``sorted`` is stable, so insights that tie on both keys keep the order
    they were emitted in (cardiovascular, sleep, stress, hydration, glucose,
    activity).

    Raises:
        ValueError: If ``limit`` is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    ranked = sorted(
        insights,
        key=lambda i: (-PRIORITY_WEIGHT.get(i.priority, 0), -i.confidence),
    )
    return ranked[:limit]
