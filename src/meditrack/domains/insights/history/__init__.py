"""Historical reading stores — read-only sources of past vital readings."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from meditrack.domains.insights.domain_logic.models import MetricType, VitalReading


@runtime_checkable
class HistoricalReadingStore(Protocol):
    """The one query the insight engine makes against reading history.

    Implementations must be safe for concurrent reads; the engine never
    writes through this interface.
    """

    def latest_by_type(self, metric: MetricType) -> VitalReading | None:
        """Most recent reading (max timestamp) of ``metric``, or None."""
        ...
