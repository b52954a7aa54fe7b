"""Append-only in-memory reading store."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from meditrack.domains.insights.domain_logic.models import MetricType, VitalReading

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    # fromisoformat accepts a trailing "Z" only from 3.11 onwards
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class InMemoryReadingStore:
    """Holds readings in memory with an O(1) latest-per-type index.

    Usage::

        store = InMemoryReadingStore(sample_readings())
        store.latest_by_type(MetricType.HEART_RATE)
    """

    def __init__(self, readings: Iterable[VitalReading] = ()) -> None:
        self._readings: list[VitalReading] = []
        self._latest: dict[MetricType, tuple[datetime, VitalReading]] = {}
        for reading in readings:
            self.append(reading)

    def append(self, reading: VitalReading) -> None:
        """Record a reading. Readings are never updated or removed."""
        ts = parse_timestamp(reading.timestamp)
        self._readings.append(reading)
        current = self._latest.get(reading.type)
        # On equal timestamps the later append wins.
        if current is None or ts >= current[0]:
            self._latest[reading.type] = (ts, reading)
        logger.debug("Recorded %s reading at %s", reading.type.value, reading.timestamp)

    def latest_by_type(self, metric: MetricType) -> VitalReading | None:
        entry = self._latest.get(metric)
        return entry[1] if entry else None

    def history(self, metric: MetricType, *, limit: int = 30) -> list[VitalReading]:
        """Readings of ``metric``, newest first."""
        matching = [r for r in self._readings if r.type == metric]
        matching.sort(key=lambda r: parse_timestamp(r.timestamp), reverse=True)
        return matching[:limit]

    def __len__(self) -> int:
        return len(self._readings)
