"""Vital resolver: caller overrides + latest history -> one VitalSnapshot."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from meditrack.domains.insights.domain_logic.models import (
    TRACKED_METRICS,
    MetricType,
    VitalSnapshot,
)
from meditrack.domains.insights.history import HistoricalReadingStore

logger = logging.getLogger(__name__)


class VitalResolver:
    """Builds the per-call snapshot the analyzers read from.

    For each tracked metric an override wins verbatim; otherwise the latest
    historical reading is used; otherwise the metric is left out. Missing
    metrics never raise.
    """

    def __init__(self, store: HistoricalReadingStore | None = None) -> None:
        self._store = store

    def resolve(self, overrides: Mapping[str | MetricType, Any] | None = None) -> VitalSnapshot:
        supplied = _normalize_overrides(overrides or {})
        values: dict[MetricType, Any] = {}

        for metric in TRACKED_METRICS:
            if supplied.get(metric) is not None:
                values[metric] = supplied[metric]
                continue
            if self._store is None:
                continue
            reading = self._store.latest_by_type(metric)
            if reading is not None:
                values[metric] = reading.value

        return VitalSnapshot(values)


def _normalize_overrides(overrides: Mapping[str | MetricType, Any]) -> dict[MetricType, Any]:
    normalized: dict[MetricType, Any] = {}
    for key, value in overrides.items():
        metric = MetricType.parse(key)
        if metric is None:
            logger.debug("Ignoring untracked vital override: %s", key)
            continue
        normalized[metric] = value
    return normalized
