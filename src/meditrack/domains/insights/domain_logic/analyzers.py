"""Category analyzers: resolved snapshot -> zero or one HealthInsight.

Each analyzer follows the same shape:

    1. Return None if a required metric is missing (insufficient data).
    2. Run the category's rule cascade; the first matching rule sets the tier.
    3. Look up severity/priority/confidence for the tier.
    4. Look up recommendation/actions from the templates (with fallback).
    5. Interpolate the metric values into a fixed description sentence.

All analyzers are deterministic and never raise on malformed metric values.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from meditrack.domains.insights.domain_logic.models import (
    HealthInsight,
    MetricType,
    SymptomContext,
    UserProfile,
    VitalSnapshot,
)
from meditrack.domains.insights.domain_logic.rules import (
    Metrics,
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
from meditrack.domains.insights.reference.loader import ReferenceData
from meditrack.domains.insights.reference.thresholds import (
    ACTIVITY,
    CARDIOVASCULAR,
    GLUCOSE,
    HYDRATION,
    SLEEP,
    STRESS,
    ActivityThresholds,
    CardiovascularThresholds,
    GlucoseThresholds,
    HydrationThresholds,
    SleepThresholds,
    StressThresholds,
    TierOutcome,
)

logger = logging.getLogger(__name__)

Analyzer = Callable[
    [VitalSnapshot, UserProfile, SymptomContext, ReferenceData], Optional[HealthInsight]
]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _fmt(value: object) -> str:
    """Render a metric for a description: 72.0 -> '72', 5.5 -> '5.5'."""
    v = num(value)
    if v is None:
        return str(value)
    if v.is_integer():
        return str(int(v))
    return f"{v:g}"


def _missing(snapshot: VitalSnapshot, category: str, *metrics: MetricType) -> bool:
    absent = [m.value for m in metrics if not snapshot.has(m)]
    if absent:
        logger.debug("Skipping %s: insufficient data (%s)", category, ", ".join(absent))
        return True
    return False


def _present_or_zero(snapshot: VitalSnapshot, metric: MetricType) -> object:
    return snapshot[metric] if snapshot.has(metric) else 0


def _build_insight(
    reference: ReferenceData,
    category_id: str,
    tier: str,
    outcome: TierOutcome,
    description: str,
    *,
    default_title: str,
    default_category: str,
) -> HealthInsight:
    template = reference.templates.get(category_id)
    entry = reference.templates.resolve(category_id, tier)

    return HealthInsight(
        id=category_id,
        title=template.title if template else default_title,
        category=template.category if template else default_category,
        description=description,
        severity=outcome.severity,
        recommendation=entry.recommendation,
        actions=tuple(entry.actions),
        benefits=template.benefits if template else "",
        confidence=max(0, min(100, int(outcome.confidence))),
        priority=outcome.priority,
        tier=tier,
    )


# ---------------------------------------------------------------------------
# Cardiovascular
# ---------------------------------------------------------------------------

def cardiovascular_rules(t: CardiovascularThresholds) -> list[Rule]:
    return [
        Rule("excellent", lambda m: (
            between(m["heart_rate"], *t.excellent_hr)
            and between(m["systolic"], *t.excellent_systolic)
            and ge(m["exercise"], t.excellent_exercise_min)
        )),
        Rule("good", lambda m: (
            between(m["heart_rate"], *t.good_hr)
            and between(m["systolic"], *t.good_systolic)
            and ge(m["exercise"], t.good_exercise_min)
        )),
        Rule("poor", lambda m: (
            gt(m["systolic"], t.poor_systolic_above) or gt(m["heart_rate"], t.poor_hr_above)
        )),
    ]


def analyze_cardiovascular(
    snapshot: VitalSnapshot,
    profile: UserProfile,
    symptoms: SymptomContext,
    reference: ReferenceData,
) -> HealthInsight | None:
    """Heart rate + systolic pressure, softened by exercise minutes."""
    if _missing(snapshot, CARDIOVASCULAR, MetricType.HEART_RATE, MetricType.BLOOD_PRESSURE_SYSTOLIC):
        return None

    t = reference.thresholds.cardiovascular
    metrics: Metrics = {
        "heart_rate": snapshot[MetricType.HEART_RATE],
        "systolic": snapshot[MetricType.BLOOD_PRESSURE_SYSTOLIC],
        "exercise": num_or(snapshot.get(MetricType.EXERCISE_MINUTES)),
    }
    tier = first_match(cardiovascular_rules(t), metrics, t.default_tier)

    return _build_insight(
        reference,
        CARDIOVASCULAR,
        tier,
        t.outcomes[tier],
        (
            f"Based on your heart rate of {_fmt(metrics['heart_rate'])} bpm and blood "
            f"pressure reading of {_fmt(metrics['systolic'])} mmHg, your cardiovascular "
            f"health appears {tier}."
        ),
        default_title="Cardiovascular Health Assessment",
        default_category="heart",
    )


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------

def sleep_rules(t: SleepThresholds) -> list[Rule]:
    return [
        Rule("excellent", lambda m: (
            between(m["hours"], *t.excellent_hours) and le(m["stress"], t.excellent_stress_max)
        )),
        Rule("good", lambda m: (
            between(m["hours"], *t.good_hours) and le(m["stress"], t.good_stress_max)
        )),
        Rule("poor", lambda m: (
            lt(m["hours"], t.poor_hours_below)
            or gt(m["hours"], t.poor_hours_above)
            or gt(m["stress"], t.poor_stress_above)
        )),
    ]


def analyze_sleep(
    snapshot: VitalSnapshot,
    profile: UserProfile,
    symptoms: SymptomContext,
    reference: ReferenceData,
) -> HealthInsight | None:
    """Sleep duration, penalized by high stress."""
    if _missing(snapshot, SLEEP, MetricType.SLEEP_HOURS):
        return None

    t = reference.thresholds.sleep
    metrics: Metrics = {
        "hours": snapshot[MetricType.SLEEP_HOURS],
        "stress": num_or(snapshot.get(MetricType.STRESS_LEVEL)),
    }
    tier = first_match(sleep_rules(t), metrics, t.default_tier)

    return _build_insight(
        reference,
        SLEEP,
        tier,
        t.outcomes[tier],
        f"Your sleep pattern shows {tier} quality with {_fmt(metrics['hours'])} hours of rest.",
        default_title="Sleep Quality Optimization",
        default_category="sleep",
    )


# ---------------------------------------------------------------------------
# Stress
# ---------------------------------------------------------------------------

def has_stress_symptoms(symptoms: tuple[str, ...], keywords: tuple[str, ...]) -> bool:
    """True if any reported symptom contains a stress keyword (case-insensitive)."""
    for symptom in symptoms:
        if not isinstance(symptom, str):
            continue
        lowered = symptom.lower()
        if any(keyword in lowered for keyword in keywords):
            return True
    return False


def stress_rules(t: StressThresholds) -> list[Rule]:
    return [
        Rule("critical", lambda m: (
            ge(m["stress"], t.critical_level)
            or (m["has_symptoms"] and ge(m["stress"], t.critical_with_symptoms))
        )),
        Rule("high", lambda m: (
            ge(m["stress"], t.high_level)
            or (m["has_symptoms"] and ge(m["stress"], t.high_with_symptoms))
        )),
        Rule("moderate", lambda m: ge(m["stress"], t.moderate_level)),
    ]


def analyze_stress(
    snapshot: VitalSnapshot,
    profile: UserProfile,
    symptoms: SymptomContext,
    reference: ReferenceData,
) -> HealthInsight | None:
    """Self-reported stress, amplified by symptoms and an elevated heart rate.

    After the cascade, a heart rate above the escalation bound combined with
    stress above its bound adds a fixed confidence boost and promotes a
    ``moderate`` tier to ``high``. Priority stays the one assigned to the
    cascade tier; severity and messaging follow the promoted tier.
    """
    if _missing(snapshot, STRESS, MetricType.STRESS_LEVEL):
        return None

    t = reference.thresholds.stress
    flagged = has_stress_symptoms(symptoms.all_symptoms(), t.symptom_keywords)
    metrics: Metrics = {
        "stress": snapshot[MetricType.STRESS_LEVEL],
        "heart_rate": num_or(snapshot.get(MetricType.HEART_RATE)),
        "has_symptoms": flagged,
    }
    base_tier = first_match(stress_rules(t), metrics, t.default_tier)
    base = t.outcomes[base_tier]

    tier = base_tier
    confidence = base.confidence
    if gt(metrics["heart_rate"], t.escalation_hr_above) and gt(metrics["stress"], t.escalation_stress_above):
        confidence += t.escalation_confidence_boost
        if tier == "moderate":
            tier = "high"

    outcome = TierOutcome(
        severity=t.outcomes[tier].severity,
        priority=base.priority,
        confidence=confidence,
    )
    suffix = " with stress-related symptoms detected" if flagged else ""

    return _build_insight(
        reference,
        STRESS,
        tier,
        outcome,
        f"Your stress levels are currently {_fmt(metrics['stress'])}/10{suffix}.",
        default_title="Stress Level Management",
        default_category="mental",
    )


# ---------------------------------------------------------------------------
# Hydration
# ---------------------------------------------------------------------------

def hydration_target(exercise_minutes: float, t: HydrationThresholds) -> float:
    """Daily target in oz: base plus a fixed amount per full exercise block."""
    blocks = math.floor(num_or(exercise_minutes) / t.exercise_block_minutes)
    return t.base_target_oz + blocks * t.oz_per_exercise_block


def hydration_rules(t: HydrationThresholds) -> list[Rule]:
    return [
        Rule("excellent", lambda m: ge(m["intake"], m["target"])),
        Rule("good", lambda m: ge(m["intake"], m["target"] * t.good_fraction)),
        Rule("poor", lambda m: lt(m["intake"], m["target"] * t.poor_fraction)),
    ]


def analyze_hydration(
    snapshot: VitalSnapshot,
    profile: UserProfile,
    symptoms: SymptomContext,
    reference: ReferenceData,
) -> HealthInsight | None:
    """Water intake against an exercise-adjusted target."""
    if _missing(snapshot, HYDRATION, MetricType.WATER_INTAKE):
        return None

    t = reference.thresholds.hydration
    target = hydration_target(num_or(snapshot.get(MetricType.EXERCISE_MINUTES)), t)
    metrics: Metrics = {
        "intake": snapshot[MetricType.WATER_INTAKE],
        "target": target,
    }
    tier = first_match(hydration_rules(t), metrics, t.default_tier)

    return _build_insight(
        reference,
        HYDRATION,
        tier,
        t.outcomes[tier],
        (
            f"Your hydration levels are {tier} with {_fmt(metrics['intake'])}oz consumed "
            f"(target: {_fmt(target)}oz)."
        ),
        default_title="Hydration & Wellness",
        default_category="nutrition",
    )


# ---------------------------------------------------------------------------
# Glucose
# ---------------------------------------------------------------------------

def glucose_rules(t: GlucoseThresholds) -> list[Rule]:
    return [
        Rule("excellent", lambda m: between(m["glucose"], *t.excellent_range)),
        Rule("good", lambda m: between(m["glucose"], *t.good_range)),
        Rule("poor", lambda m: ge(m["glucose"], t.poor_at_or_above)),
    ]


def analyze_glucose(
    snapshot: VitalSnapshot,
    profile: UserProfile,
    symptoms: SymptomContext,
    reference: ReferenceData,
) -> HealthInsight | None:
    if _missing(snapshot, GLUCOSE, MetricType.GLUCOSE):
        return None

    t = reference.thresholds.glucose
    metrics: Metrics = {"glucose": snapshot[MetricType.GLUCOSE]}
    tier = first_match(glucose_rules(t), metrics, t.default_tier)

    return _build_insight(
        reference,
        GLUCOSE,
        tier,
        t.outcomes[tier],
        f"Your glucose levels show {tier} control at {_fmt(metrics['glucose'])} mg/dL.",
        default_title="Blood Sugar Balance",
        default_category="metabolic",
    )


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

def activity_rules(t: ActivityThresholds) -> list[Rule]:
    return [
        Rule("excellent", lambda m: (
            ge(m["steps"], t.excellent_steps) and ge(m["exercise"], t.excellent_exercise)
        )),
        Rule("good", lambda m: (
            ge(m["steps"], t.good_steps) and ge(m["exercise"], t.good_exercise)
        )),
        Rule("poor", lambda m: (
            lt(m["steps"], t.poor_steps_below) and lt(m["exercise"], t.poor_exercise_below)
        )),
    ]


def analyze_activity(
    snapshot: VitalSnapshot,
    profile: UserProfile,
    symptoms: SymptomContext,
    reference: ReferenceData,
) -> HealthInsight | None:
    """Steps and exercise minutes; needs at least one of the two."""
    if not (snapshot.has(MetricType.STEPS) or snapshot.has(MetricType.EXERCISE_MINUTES)):
        logger.debug("Skipping %s: insufficient data (steps, exerciseMinutes)", ACTIVITY)
        return None

    t = reference.thresholds.activity
    metrics: Metrics = {
        "steps": _present_or_zero(snapshot, MetricType.STEPS),
        "exercise": _present_or_zero(snapshot, MetricType.EXERCISE_MINUTES),
    }
    tier = first_match(activity_rules(t), metrics, t.default_tier)

    return _build_insight(
        reference,
        ACTIVITY,
        tier,
        t.outcomes[tier],
        (
            f"Your activity level shows {tier} performance with {_fmt(metrics['steps'])} "
            f"steps and {_fmt(metrics['exercise'])} minutes of exercise."
        ),
        default_title="Physical Activity Assessment",
        default_category="fitness",
    )


# Emission order doubles as the ranker's stable tiebreak.
ANALYZERS: tuple[tuple[str, Analyzer], ...] = (
    (CARDIOVASCULAR, analyze_cardiovascular),
    (SLEEP, analyze_sleep),
    (STRESS, analyze_stress),
    (HYDRATION, analyze_hydration),
    (GLUCOSE, analyze_glucose),
    (ACTIVITY, analyze_activity),
)
