"""Per-reading vital sign validation and the simple averaged health score.

Independent of the category analyzers: these look at one metric at a time
against safe and normal ranges and are used when recording readings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from meditrack.domains.insights.domain_logic.rules import num


@dataclass(frozen=True)
class VitalRange:
    safe: tuple[float, float]
    normal: tuple[float, float]


VITAL_RANGES: dict[str, VitalRange] = {
    "heartRate": VitalRange(safe=(40, 200), normal=(60, 100)),
    "bloodPressureSystolic": VitalRange(safe=(70, 250), normal=(90, 140)),
    "bloodPressureDiastolic": VitalRange(safe=(40, 150), normal=(60, 90)),
    "temperature": VitalRange(safe=(95, 110), normal=(97, 99.5)),
    "oxygenSaturation": VitalRange(safe=(70, 100), normal=(95, 100)),
    "glucose": VitalRange(safe=(50, 400), normal=(70, 140)),
}

# Points per validated reading, by severity
SEVERITY_POINTS = {"normal": 100, "warning": 70, "critical": 30}


@dataclass(frozen=True)
class VitalValidation:
    is_valid: bool
    severity: str
    message: str | None = None


@dataclass(frozen=True)
class HealthScore:
    score: int
    level: str
    recommendations: list[str] = field(default_factory=list)


def validate_vital_sign(metric: str, value: Any) -> VitalValidation:
    """Check one reading against its safe and normal ranges.

    Unknown metrics and values outside the safe range are invalid and
    critical; values inside the safe range but outside normal are a warning.
    """
    vital_range = VITAL_RANGES.get(str(metric))
    if vital_range is None:
        return VitalValidation(False, "critical", "Unknown vital sign type")

    v = num(value)
    if v is None:
        return VitalValidation(False, "critical", "Value is not a number")

    safe_lo, safe_hi = vital_range.safe
    if v < safe_lo or v > safe_hi:
        return VitalValidation(False, "critical", "Value outside safe range")

    normal_lo, normal_hi = vital_range.normal
    if v < normal_lo or v > normal_hi:
        return VitalValidation(True, "warning", "Value outside normal range")

    return VitalValidation(True, "normal")


def classify_reading(metric: str, value: Any) -> str:
    """Severity to store on a newly recorded reading.

    Metrics without reference ranges (sleep, steps, ...) are stored as normal.
    """
    if str(metric) not in VITAL_RANGES:
        return "normal"
    return validate_vital_sign(metric, value).severity


def _display_name(metric: str) -> str:
    return re.sub(r"([A-Z])", r" \1", metric).lower()


def calculate_health_score(vitals: Mapping[str, Any]) -> HealthScore:
    """Average the points of every valid reading into a 0-100 score."""
    total = 0
    valid = 0
    recommendations: list[str] = []

    for metric, value in vitals.items():
        validation = validate_vital_sign(metric, value)
        if not validation.is_valid:
            continue
        total += SEVERITY_POINTS[validation.severity]
        valid += 1
        if validation.severity == "warning":
            recommendations.append(f"Monitor your {_display_name(metric)}")
        elif validation.severity == "critical":
            recommendations.append(
                f"Consult a healthcare professional about your {_display_name(metric)}"
            )

    average = total / valid if valid else 0

    if average >= 90:
        level = "excellent"
    elif average >= 75:
        level = "good"
    elif average >= 60:
        level = "fair"
    else:
        level = "poor"

    return HealthScore(score=int(average + 0.5), level=level, recommendations=recommendations)
