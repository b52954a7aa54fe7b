"""Ordered rule cascades and non-raising numeric comparisons.

A cascade is a list of ``Rule(tier, predicate)`` evaluated top to bottom.
The first predicate that returns True decides the tier; later rules are not
consulted. Tier bands are therefore priority-ordered conditions, not
symmetric ranges.

Comparison helpers return False whenever an operand is not a real number, so
malformed inputs fall through to the cascade's default tier instead of raising.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

Metrics = Mapping[str, Any]
Predicate = Callable[[Metrics], bool]


@dataclass(frozen=True)
class Rule:
    """A tier and the condition that selects it."""

    tier: str
    predicate: Predicate


def first_match(rules: Sequence[Rule], metrics: Metrics, default: str) -> str:
    """Return the tier of the first rule whose predicate holds, else ``default``."""
    for rule in rules:
        if rule.predicate(metrics):
            return rule.tier
    return default


def num(value: Any) -> float | None:
    """Return ``value`` as a float, or None if it is not a finite real number."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def num_or(value: Any, default: float = 0.0) -> float:
    """Like :func:`num` but substitutes ``default`` for non-numbers."""
    result = num(value)
    return default if result is None else result


def between(value: Any, lo: float, hi: float) -> bool:
    v = num(value)
    return v is not None and lo <= v <= hi


def gt(value: Any, bound: float) -> bool:
    v = num(value)
    return v is not None and v > bound


def ge(value: Any, bound: float) -> bool:
    v = num(value)
    return v is not None and v >= bound


def lt(value: Any, bound: float) -> bool:
    v = num(value)
    return v is not None and v < bound


def le(value: Any, bound: float) -> bool:
    v = num(value)
    return v is not None and v <= bound
