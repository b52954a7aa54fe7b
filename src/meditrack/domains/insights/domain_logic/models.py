"""Insight engine models: metric types, snapshots, profiles and insights."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


def string_tuple(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Tuple of strings; a bare string is one item, not its characters."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


class MetricType(str, Enum):
    """The ten tracked vital/lifestyle metrics, valued by their wire names."""

    HEART_RATE = "heartRate"
    BLOOD_PRESSURE_SYSTOLIC = "bloodPressureSystolic"
    BLOOD_PRESSURE_DIASTOLIC = "bloodPressureDiastolic"
    TEMPERATURE = "temperature"
    GLUCOSE = "glucose"
    SLEEP_HOURS = "sleepHours"
    STRESS_LEVEL = "stressLevel"
    WATER_INTAKE = "waterIntake"
    STEPS = "steps"
    EXERCISE_MINUTES = "exerciseMinutes"

    @classmethod
    def parse(cls, name: str | MetricType) -> MetricType | None:
        """Return the member for a wire name, or None if it is not tracked."""
        if isinstance(name, MetricType):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


TRACKED_METRICS: tuple[MetricType, ...] = tuple(MetricType)

SEVERITIES = ("normal", "warning", "critical")
TRENDS = ("up", "down", "stable")
PRIORITIES = ("low", "medium", "high")


@dataclass(frozen=True)
class VitalReading:
    """A single recorded measurement. Immutable once recorded."""

    type: MetricType
    value: float
    unit: str
    timestamp: str  # ISO 8601
    severity: str = "normal"
    trend: str = "stable"
    trend_value: float = 0.0
    notes: str | None = None
    id: str = ""


class VitalSnapshot(Mapping):
    """Resolved current metric values for one engine call.

    Every key is either a caller override or the latest historical reading
    for that metric. A missing key means insufficient data, never zero.
    """

    def __init__(self, values: Mapping[MetricType, Any] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: MetricType) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[MetricType]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k.value}={v!r}" for k, v in self._values.items())
        return f"VitalSnapshot({inner})"

    def has(self, metric: MetricType) -> bool:
        """True if the metric is present with a non-null value."""
        return self._values.get(metric) is not None

    def as_dict(self) -> dict[str, Any]:
        """Return values keyed by wire name."""
        return {k.value: v for k, v in self._values.items()}


@dataclass(frozen=True)
class UserProfile:
    """Optional demographic/lifestyle context. Every field is advisory."""

    age: int | None = None
    gender: str | None = None  # 'male' | 'female' | 'other'
    height: float | None = None
    weight: float | None = None
    activity_level: str | None = None  # 'sedentary' ... 'very_active'
    medical_conditions: tuple[str, ...] = ()
    medications: tuple[str, ...] = ()
    goals: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> UserProfile:
        """Build a profile from camelCase or snake_case keys; unknown keys ignored."""
        if not data:
            return cls()

        def pick(*names: str) -> Any:
            for name in names:
                if name in data:
                    return data[name]
            return None

        return cls(
            age=pick("age"),
            gender=pick("gender"),
            height=pick("height"),
            weight=pick("weight"),
            activity_level=pick("activityLevel", "activity_level"),
            medical_conditions=tuple(pick("medicalConditions", "medical_conditions") or ()),
            medications=tuple(pick("medications") or ()),
            goals=tuple(pick("goals") or ()),
        )


@dataclass(frozen=True)
class SymptomInput:
    """Structured symptom report supplied alongside vitals."""

    symptoms: tuple[str, ...] = ()
    severity: int = 1  # 1-10
    duration: str = ""
    frequency: str = ""
    triggers: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SymptomInput | None:
        if data is None:
            return None
        return cls(
            symptoms=string_tuple(data.get("symptoms")),
            severity=data.get("severity", 1),
            duration=data.get("duration", ""),
            frequency=data.get("frequency", ""),
            triggers=string_tuple(data.get("triggers")),
        )


@dataclass(frozen=True)
class SymptomContext:
    """Symptom information visible to the analyzers."""

    symptoms: tuple[str, ...] = ()
    symptom_input: SymptomInput | None = None

    def all_symptoms(self) -> tuple[str, ...]:
        extra = self.symptom_input.symptoms if self.symptom_input else ()
        return self.symptoms + tuple(extra)


@dataclass(frozen=True)
class HealthInsight:
    """One prioritized recommendation produced by a category analyzer."""

    id: str
    title: str
    category: str
    description: str
    severity: str
    recommendation: str
    actions: tuple[str, ...]
    benefits: str
    confidence: int  # 0-100
    priority: str
    tier: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["actions"] = list(self.actions)
        return data

