"""Composite reading store — queries several stores in priority order.

The first store that has a reading of the requested type wins, so device
history can take precedence over manual entries, with sample data as the
last resort.
"""

from __future__ import annotations

import logging

from meditrack.domains.insights.domain_logic.models import MetricType, VitalReading
from meditrack.domains.insights.history import HistoricalReadingStore

logger = logging.getLogger(__name__)


class CompositeReadingStore:
    """Merges multiple HistoricalReadingStores with priority ordering.

    Usage::

        composite = CompositeReadingStore([
            sqlite_repository,  # Highest priority
            sample_store,       # Fallback
        ])
        composite.latest_by_type(MetricType.GLUCOSE)
    """

    def __init__(self, stores: list[HistoricalReadingStore]) -> None:
        """Initialize with stores in priority order (highest first).

        Raises:
            ValueError: If ``stores`` is empty.
        """
        if not stores:
            raise ValueError("At least one reading store is required")
        self._stores = stores

    def latest_by_type(self, metric: MetricType) -> VitalReading | None:
        for store in self._stores:
            reading = store.latest_by_type(metric)
            if reading is not None:
                return reading
        return None
