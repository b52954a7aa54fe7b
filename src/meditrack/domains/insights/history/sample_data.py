"""Sample reading history for development and demos.

Represents a moderately healthy adult over two days: mostly normal vitals,
short sleep on the latest night, and hydration a little under target.
"""

from __future__ import annotations

from meditrack.domains.insights.domain_logic.models import MetricType, VitalReading

_SAMPLE_ROWS: list[tuple[MetricType, float, str, str, str, str, float]] = [
    # (type, value, unit, timestamp, severity, trend, trend_value)
    (MetricType.HEART_RATE, 74, "bpm", "2026-01-14T08:00:00Z", "normal", "stable", 0),
    (MetricType.HEART_RATE, 72, "bpm", "2026-01-15T08:00:00Z", "normal", "down", -2),
    (MetricType.BLOOD_PRESSURE_SYSTOLIC, 124, "mmHg", "2026-01-14T08:05:00Z", "normal", "stable", 0),
    (MetricType.BLOOD_PRESSURE_SYSTOLIC, 118, "mmHg", "2026-01-15T08:05:00Z", "normal", "down", -6),
    (MetricType.BLOOD_PRESSURE_DIASTOLIC, 80, "mmHg", "2026-01-14T08:05:00Z", "normal", "stable", 0),
    (MetricType.BLOOD_PRESSURE_DIASTOLIC, 78, "mmHg", "2026-01-15T08:05:00Z", "normal", "down", -2),
    (MetricType.TEMPERATURE, 98.4, "°F", "2026-01-15T08:10:00Z", "normal", "stable", 0),
    (MetricType.GLUCOSE, 102, "mg/dL", "2026-01-14T07:30:00Z", "normal", "up", 4),
    (MetricType.GLUCOSE, 95, "mg/dL", "2026-01-15T07:30:00Z", "normal", "down", -7),
    (MetricType.SLEEP_HOURS, 7.5, "hours", "2026-01-14T07:00:00Z", "normal", "stable", 0),
    (MetricType.SLEEP_HOURS, 6.5, "hours", "2026-01-15T07:00:00Z", "warning", "down", -1),
    (MetricType.STRESS_LEVEL, 4, "/10", "2026-01-15T20:00:00Z", "normal", "stable", 0),
    (MetricType.WATER_INTAKE, 56, "oz", "2026-01-15T21:00:00Z", "warning", "down", -8),
    (MetricType.STEPS, 8200, "steps", "2026-01-15T21:00:00Z", "normal", "up", 900),
    (MetricType.EXERCISE_MINUTES, 35, "minutes", "2026-01-15T21:00:00Z", "normal", "up", 5),
]


def sample_readings() -> list[VitalReading]:
    """Return a fresh list of sample readings (oldest first per type)."""
    return [
        VitalReading(
            id=f"sample-{i}",
            type=metric,
            value=value,
            unit=unit,
            timestamp=ts,
            severity=severity,
            trend=trend,
            trend_value=trend_value,
        )
        for i, (metric, value, unit, ts, severity, trend, trend_value) in enumerate(_SAMPLE_ROWS)
    ]
