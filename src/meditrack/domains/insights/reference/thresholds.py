"""Threshold tables: reference ranges, targets and tier outcomes per category.

Loaded once at import time and never mutated. Analyzers read these through
the ``ThresholdTables`` instance carried by ``ReferenceData`` so tests can
swap in alternate tables without patching module globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


# ---------------------------------------------------------------------------
# Category ids (also the template keys and HealthInsight.id values)
# ---------------------------------------------------------------------------

CARDIOVASCULAR = "cardiovascular_health"
SLEEP = "sleep_optimization"
STRESS = "stress_management"
HYDRATION = "hydration_wellness"
GLUCOSE = "glucose_management"
ACTIVITY = "activity_optimization"

# Emission order; the ranker uses it as the stable tiebreak.
CATEGORY_ORDER = (CARDIOVASCULAR, SLEEP, STRESS, HYDRATION, GLUCOSE, ACTIVITY)

PRIORITY_WEIGHT = MappingProxyType({"high": 3, "medium": 2, "low": 1})

# Tiers counted as "healthy" by the wellness score.
FAVORABLE_TIERS = frozenset({"excellent", "good", "low", "normal"})

STRESS_SYMPTOM_KEYWORDS = ("anxiety", "insomnia", "headache", "fatigue", "irritability")


@dataclass(frozen=True)
class TierOutcome:
    """Severity, priority and confidence assigned to a tier."""

    severity: str
    priority: str
    confidence: int


def _outcomes(**tiers: tuple[str, str, int]) -> Mapping[str, TierOutcome]:
    return MappingProxyType({name: TierOutcome(*triple) for name, triple in tiers.items()})


# ---------------------------------------------------------------------------
# Per-category thresholds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CardiovascularThresholds:
    excellent_hr: tuple[float, float] = (60, 80)
    excellent_systolic: tuple[float, float] = (90, 120)
    excellent_exercise_min: float = 30
    good_hr: tuple[float, float] = (60, 100)
    good_systolic: tuple[float, float] = (90, 130)
    good_exercise_min: float = 20
    poor_systolic_above: float = 140
    poor_hr_above: float = 100
    default_tier: str = "fair"
    outcomes: Mapping[str, TierOutcome] = field(default_factory=lambda: _outcomes(
        excellent=("normal", "low", 90),
        good=("normal", "low", 85),
        poor=("critical", "high", 95),
        fair=("warning", "medium", 75),
    ))


@dataclass(frozen=True)
class SleepThresholds:
    excellent_hours: tuple[float, float] = (7, 9)
    excellent_stress_max: float = 3
    good_hours: tuple[float, float] = (6, 10)
    good_stress_max: float = 5
    poor_hours_below: float = 6
    poor_hours_above: float = 10
    poor_stress_above: float = 7
    default_tier: str = "fair"
    outcomes: Mapping[str, TierOutcome] = field(default_factory=lambda: _outcomes(
        excellent=("normal", "low", 90),
        good=("normal", "low", 85),
        poor=("warning", "high", 95),
        fair=("normal", "medium", 80),
    ))


@dataclass(frozen=True)
class StressThresholds:
    critical_level: float = 9
    critical_with_symptoms: float = 7
    high_level: float = 7
    high_with_symptoms: float = 5
    moderate_level: float = 4
    escalation_hr_above: float = 100
    escalation_stress_above: float = 5
    escalation_confidence_boost: int = 10
    symptom_keywords: tuple[str, ...] = STRESS_SYMPTOM_KEYWORDS
    default_tier: str = "low"
    outcomes: Mapping[str, TierOutcome] = field(default_factory=lambda: _outcomes(
        critical=("critical", "high", 95),
        high=("warning", "high", 90),
        moderate=("normal", "medium", 80),
        low=("normal", "low", 75),
    ))


@dataclass(frozen=True)
class HydrationThresholds:
    base_target_oz: float = 64
    exercise_block_minutes: float = 30
    oz_per_exercise_block: float = 8
    good_fraction: float = 0.75
    poor_fraction: float = 0.5
    default_tier: str = "fair"
    outcomes: Mapping[str, TierOutcome] = field(default_factory=lambda: _outcomes(
        excellent=("normal", "low", 85),
        good=("normal", "low", 80),
        poor=("warning", "high", 90),
        fair=("normal", "medium", 70),
    ))


@dataclass(frozen=True)
class GlucoseThresholds:
    excellent_range: tuple[float, float] = (80, 100)  # mg/dL
    good_range: tuple[float, float] = (70, 110)
    poor_at_or_above: float = 126
    default_tier: str = "fair"
    outcomes: Mapping[str, TierOutcome] = field(default_factory=lambda: _outcomes(
        excellent=("normal", "low", 90),
        good=("normal", "low", 85),
        poor=("critical", "high", 95),
        fair=("warning", "medium", 85),
    ))


@dataclass(frozen=True)
class ActivityThresholds:
    excellent_steps: float = 10000
    excellent_exercise: float = 45
    good_steps: float = 7500
    good_exercise: float = 30
    poor_steps_below: float = 5000
    poor_exercise_below: float = 15
    default_tier: str = "fair"
    outcomes: Mapping[str, TierOutcome] = field(default_factory=lambda: _outcomes(
        excellent=("normal", "low", 90),
        good=("normal", "low", 85),
        poor=("warning", "high", 95),
        fair=("normal", "medium", 80),
    ))


@dataclass(frozen=True)
class ThresholdTables:
    """All category thresholds bundled for injection into the engine."""

    cardiovascular: CardiovascularThresholds = field(default_factory=CardiovascularThresholds)
    sleep: SleepThresholds = field(default_factory=SleepThresholds)
    stress: StressThresholds = field(default_factory=StressThresholds)
    hydration: HydrationThresholds = field(default_factory=HydrationThresholds)
    glucose: GlucoseThresholds = field(default_factory=GlucoseThresholds)
    activity: ActivityThresholds = field(default_factory=ActivityThresholds)


DEFAULT_THRESHOLDS = ThresholdTables()
