"""Health recommendation engine — resolver, analyzers and ranker wired together.

All computation is deterministic: no randomness, no date-based shuffling,
no learning. The only external read is the history store's
``latest_by_type`` query.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from meditrack.domains.insights.domain_logic import ranker, wellness
from meditrack.domains.insights.domain_logic.analyzers import ANALYZERS, Analyzer
from meditrack.domains.insights.domain_logic.models import (
    HealthInsight,
    MetricType,
    SymptomContext,
    SymptomInput,
    UserProfile,
    VitalSnapshot,
    string_tuple,
)
from meditrack.domains.insights.domain_logic.resolver import VitalResolver
from meditrack.domains.insights.history import HistoricalReadingStore
from meditrack.domains.insights.reference.loader import ReferenceData

logger = logging.getLogger(__name__)


class HealthRecommendationEngine:
    """Turns vitals, symptoms and lifestyle context into ranked insights.

    Usage::

        engine = HealthRecommendationEngine(load_reference_data(), store)
        insights = engine.get_health_recommendations(
            vitals={"heartRate": 105, "bloodPressureSystolic": 145},
            symptoms=["tension headache"],
        )
    """

    def __init__(
        self,
        reference: ReferenceData,
        store: HistoricalReadingStore | None = None,
        *,
        default_limit: int = ranker.DEFAULT_LIMIT,
        analyzers: Iterable[tuple[str, Analyzer]] = ANALYZERS,
    ) -> None:
        if default_limit < 0:
            raise ValueError(f"default_limit must be non-negative, got {default_limit}")
        self._reference = reference
        self._resolver = VitalResolver(store)
        self._default_limit = default_limit
        self._analyzers = tuple(analyzers)

    @property
    def categories(self) -> list[str]:
        return [category for category, _ in self._analyzers]

    def resolve(self, vitals: Mapping[str | MetricType, Any] | None = None) -> VitalSnapshot:
        return self._resolver.resolve(vitals)

    def analyze(
        self,
        snapshot: VitalSnapshot,
        profile: UserProfile | None = None,
        symptoms: SymptomContext | None = None,
    ) -> list[HealthInsight]:
        """Run every analyzer and return the non-null insights in emission order."""
        profile = profile or UserProfile()
        symptoms = symptoms or SymptomContext()
        insights: list[HealthInsight] = []
        for category, analyzer in self._analyzers:
            insight = analyzer(snapshot, profile, symptoms, self._reference)
            if insight is not None:
                insights.append(insight)
                logger.debug(
                    "%s assessed %s (priority=%s, confidence=%d)",
                    category, insight.tier, insight.priority, insight.confidence,
                )
        return insights

    def get_health_recommendations(
        self,
        vitals: Mapping[str | MetricType, Any] | None = None,
        symptoms: str | Iterable[str] | None = None,
        lifestyle: UserProfile | Mapping[str, Any] | None = None,
        symptom_input: SymptomInput | Mapping[str, Any] | None = None,
        *,
        limit: int | None = None,
    ) -> list[HealthInsight]:
        """Resolve vitals, analyze each category and return the top insights.

        Args:
            vitals: Current readings keyed by metric wire name; gaps are
                filled from the history store.
            symptoms: Free-text symptom labels.
            lifestyle: ``UserProfile`` or a dict with profile fields.
            symptom_input: Structured symptom report.
            limit: Max insights returned; defaults to the engine's limit.

        Returns:
            Insights ordered by priority then confidence, at most ``limit``.
        """
        snapshot = self.resolve(vitals)
        insights = self.analyze(
            snapshot,
            _as_profile(lifestyle),
            _as_symptoms(symptoms, symptom_input),
        )
        selected = ranker.select(insights, self._default_limit if limit is None else limit)
        logger.info(
            "Generated %d insights from %d resolved metrics, returning %d",
            len(insights), len(snapshot), len(selected),
        )
        return selected

    def assess_tiers(
        self,
        vitals: Mapping[str | MetricType, Any] | None = None,
        symptoms: str | Iterable[str] | None = None,
        lifestyle: UserProfile | Mapping[str, Any] | None = None,
        symptom_input: SymptomInput | Mapping[str, Any] | None = None,
    ) -> dict[str, str | None]:
        """Category -> tier for every analyzer (None when data is insufficient)."""
        insights = self.analyze(
            self.resolve(vitals),
            _as_profile(lifestyle),
            _as_symptoms(symptoms, symptom_input),
        )
        return wellness.tiers_from_insights(insights, self.categories)

    def wellness_score(self, vitals: Mapping[str | MetricType, Any] | None = None, **context: Any) -> int:
        return wellness.score(self.assess_tiers(vitals, **context))


def _as_profile(lifestyle: UserProfile | Mapping[str, Any] | None) -> UserProfile:
    if isinstance(lifestyle, UserProfile):
        return lifestyle
    return UserProfile.from_dict(lifestyle)


def _as_symptoms(
    symptoms: str | Iterable[str] | None,
    symptom_input: SymptomInput | Mapping[str, Any] | None,
) -> SymptomContext:
    if symptom_input is not None and not isinstance(symptom_input, SymptomInput):
        symptom_input = SymptomInput.from_dict(symptom_input)
    return SymptomContext(symptoms=string_tuple(symptoms), symptom_input=symptom_input)
