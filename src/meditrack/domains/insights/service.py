"""Insight service — application factory and facade over the engine.

This module provides:
- create_service() which wires settings, reference data, history storage,
  the engine and the audit trail together
- InsightService, the entry point callers use to get recommendations,
  wellness scores and to record new readings
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from meditrack.core.audit.logger import AuditLogger
from meditrack.core.config.settings import Settings, get_settings
from meditrack.core.storage.database import DatabaseError, HealthDatabase
from meditrack.core.storage.encryption import EncryptionError, FieldEncryptor
from meditrack.domains.insights.domain_logic.engine import HealthRecommendationEngine
from meditrack.domains.insights.domain_logic.models import (
    HealthInsight,
    MetricType,
    SymptomInput,
    UserProfile,
    VitalReading,
    string_tuple,
)
from meditrack.domains.insights.domain_logic.rules import num
from meditrack.domains.insights.domain_logic.vital_checks import classify_reading
from meditrack.domains.insights.history import HistoricalReadingStore
from meditrack.domains.insights.history.composite import CompositeReadingStore
from meditrack.domains.insights.history.in_memory import InMemoryReadingStore
from meditrack.domains.insights.history.sample_data import sample_readings
from meditrack.domains.insights.history.sqlite_store import VitalReadingRepository
from meditrack.domains.insights.reference.loader import load_reference_data

logger = logging.getLogger(__name__)

DEFAULT_UNITS = {
    MetricType.HEART_RATE: "bpm",
    MetricType.BLOOD_PRESSURE_SYSTOLIC: "mmHg",
    MetricType.BLOOD_PRESSURE_DIASTOLIC: "mmHg",
    MetricType.TEMPERATURE: "°F",
    MetricType.GLUCOSE: "mg/dL",
    MetricType.SLEEP_HOURS: "hours",
    MetricType.STRESS_LEVEL: "/10",
    MetricType.WATER_INTAKE: "oz",
    MetricType.STEPS: "steps",
    MetricType.EXERCISE_MINUTES: "minutes",
}

# Changes smaller than this fraction of the previous value count as stable.
TREND_TOLERANCE = 0.02


class InsightService:
    """Facade that runs the engine, records readings and audits every run.

    Usage::

        service = create_service()
        insights = service.get_recommendations(vitals={"sleepHours": 5.5})
        score = service.wellness_score()
    """

    def __init__(
        self,
        engine: HealthRecommendationEngine,
        store: HistoricalReadingStore,
        *,
        writer: InMemoryReadingStore | VitalReadingRepository | None = None,
        audit: AuditLogger | None = None,
        database: HealthDatabase | None = None,
    ) -> None:
        self.engine = engine
        self.store = store
        self._writer = writer
        self._audit = audit
        self._db = database

    @property
    def audit(self) -> AuditLogger | None:
        """Audit trail, present only with the sqlite backend."""
        return self._audit

    def get_recommendations(
        self,
        vitals: Mapping[str, Any] | None = None,
        symptoms: str | Iterable[str] | None = None,
        lifestyle: UserProfile | Mapping[str, Any] | None = None,
        symptom_input: SymptomInput | Mapping[str, Any] | None = None,
        *,
        limit: int | None = None,
    ) -> list[HealthInsight]:
        """Run the engine and audit the call (input hashed, never stored)."""
        symptoms = list(string_tuple(symptoms))
        request = {
            "vitals": {str(getattr(k, "value", k)): v for k, v in (vitals or {}).items()},
            "symptoms": symptoms,
            "lifestyle": _plain(lifestyle),
            "symptom_input": _plain(symptom_input),
            "limit": limit,
        }
        start = time.perf_counter()
        try:
            insights = self.engine.get_health_recommendations(
                vitals, symptoms, lifestyle, symptom_input, limit=limit
            )
        except Exception as exc:
            self._log_run(request, [], start, status="failure", error_type=type(exc).__name__)
            raise

        self._log_run(request, [i.id for i in insights], start)
        return insights

    def wellness_score(self, vitals: Mapping[str, Any] | None = None, **context: Any) -> int:
        return self.engine.wellness_score(vitals, **context)

    def record_reading(
        self,
        metric: str | MetricType,
        value: float,
        *,
        unit: str | None = None,
        timestamp: str | None = None,
        notes: str | None = None,
    ) -> VitalReading:
        """Append a reading, deriving its severity and trend vs. the previous one.

        Raises:
            ValueError: If the metric is not tracked or no writable store is
                configured.
        """
        metric_type = MetricType.parse(metric)
        if metric_type is None:
            raise ValueError(f"Unknown metric type: {metric!r}")
        if self._writer is None:
            raise ValueError("No writable reading store configured")

        previous = self._writer.latest_by_type(metric_type)
        trend, trend_value = _trend(previous.value if previous else None, value)
        reading = VitalReading(
            type=metric_type,
            value=value,
            unit=unit if unit is not None else DEFAULT_UNITS[metric_type],
            timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
            severity=classify_reading(metric_type.value, value),
            trend=trend,
            trend_value=trend_value,
            notes=notes,
        )
        self._writer.append(reading)
        return reading

    def delete_history(self) -> int:
        """Delete all persisted readings (sqlite backend only)."""
        if not isinstance(self._writer, VitalReadingRepository):
            raise ValueError("Reading history is not persisted; nothing to delete")
        count = self._writer.delete_all()
        if self._audit is not None:
            self._audit.log_data_delete(count=count)
        return count

    def close(self) -> None:
        if self._db is not None:
            self._db.close()

    def _log_run(
        self,
        request: dict[str, Any],
        insight_ids: list[str],
        start: float,
        **kwargs: Any,
    ) -> None:
        if self._audit is None:
            return
        duration_ms = round((time.perf_counter() - start) * 1000, 3)
        self._audit.log_insight_run(request, insight_ids, duration_ms=duration_ms, **kwargs)


def create_service(
    settings: Settings | None = None,
    *,
    store_override: HistoricalReadingStore | None = None,
) -> InsightService:
    """Create and configure the insight service.

    1. Loads threshold tables and insight templates
    2. Opens the reading history (memory, or encrypted SQLite)
    3. Creates the engine and, with SQLite, the audit logger
    """
    settings = settings or get_settings()
    logging.getLogger("meditrack").setLevel(
        getattr(logging, settings.meditrack_log_level.upper(), logging.INFO)
    )

    reference = load_reference_data(settings.templates_path or None)

    database: HealthDatabase | None = None
    audit: AuditLogger | None = None
    writer: InMemoryReadingStore | VitalReadingRepository | None = None

    if store_override is not None:
        store = store_override
    else:
        if settings.history_backend == "sqlite":
            database, writer = _open_sqlite(settings)
            if database is not None:
                audit = AuditLogger(database)
        if writer is None:
            writer = InMemoryReadingStore()
            logger.info("Using in-memory reading history")

        if settings.seed_sample_history:
            store = CompositeReadingStore([writer, InMemoryReadingStore(sample_readings())])
            logger.info("Sample reading history enabled as fallback")
        else:
            store = writer

    engine = HealthRecommendationEngine(
        reference, store, default_limit=settings.insight_limit
    )
    return InsightService(engine, store, writer=writer, audit=audit, database=database)


def _open_sqlite(
    settings: Settings,
) -> tuple[HealthDatabase | None, VitalReadingRepository | None]:
    if not settings.encryption_key:
        logger.warning(
            "No ENCRYPTION_KEY configured — falling back to in-memory history. "
            "Set ENCRYPTION_KEY to persist readings."
        )
        return None, None
    try:
        encryptor = FieldEncryptor(settings.encryption_key)
    except EncryptionError as exc:
        logger.error("Failed to initialize storage: %s", exc)
        logger.warning("Continuing without persistence — readings will not be stored")
        return None, None

    database = HealthDatabase(settings.db_path)
    try:
        database.initialize()
    except DatabaseError as exc:
        logger.error("Failed to initialize storage: %s", exc)
        logger.warning("Continuing without persistence — readings will not be stored")
        return None, None
    logger.info(
        "Reading history opened: %s (schema v%d)",
        settings.db_path,
        database.get_schema_version(),
    )
    return database, VitalReadingRepository(database, encryptor)


def _trend(previous: Any, current: Any) -> tuple[str, float]:
    prev, cur = num(previous), num(current)
    if prev is None or cur is None:
        return "stable", 0.0
    delta = cur - prev
    if abs(delta) <= abs(prev) * TREND_TOLERANCE:
        return "stable", round(delta, 2)
    return ("up" if delta > 0 else "down"), round(delta, 2)


def _plain(value: Any) -> Any:
    if value is None:
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return dict(value)
