"""Integration tests for the insight service factory and facade.

Exercises create_service() with each history backend to verify the wiring of
settings, reference data, storage, the engine and the audit trail.
"""

from __future__ import annotations

import pytest

from meditrack.core.config.settings import Settings
from meditrack.domains.insights.domain_logic.models import MetricType
from meditrack.domains.insights.history.composite import CompositeReadingStore
from meditrack.domains.insights.history.in_memory import InMemoryReadingStore
from meditrack.domains.insights.service import InsightService, create_service


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.fixture
def memory_service():
    service = create_service(_settings())
    yield service
    service.close()


@pytest.fixture
def sqlite_service(tmp_path, encryption_key):
    service = create_service(_settings(
        history_backend="sqlite",
        db_path=str(tmp_path / "vitals.db"),
        encryption_key=encryption_key,
    ))
    yield service
    service.close()


class TestCreateService:
    def test_memory_backend(self, memory_service: InsightService):
        assert isinstance(memory_service.store, InMemoryReadingStore)
        assert memory_service.get_recommendations() == []

    def test_sample_history_seeded(self):
        service = create_service(_settings(seed_sample_history=True))
        assert isinstance(service.store, CompositeReadingStore)
        assert len(service.get_recommendations()) == 3
        # All favorable except moderate stress: 5 of 6
        assert service.wellness_score() == 83

    def test_insight_limit_from_settings(self):
        service = create_service(_settings(seed_sample_history=True, insight_limit=5))
        assert len(service.get_recommendations()) == 5

    def test_store_override(self, history_store: InMemoryReadingStore):
        service = create_service(_settings(), store_override=history_store)
        assert service.store is history_store
        assert service.wellness_score() == 100

    def test_sqlite_without_key_falls_back_to_memory(self, tmp_path):
        service = create_service(_settings(
            history_backend="sqlite",
            db_path=str(tmp_path / "vitals.db"),
        ))
        assert isinstance(service.store, InMemoryReadingStore)
        assert not (tmp_path / "vitals.db").exists()

    def test_sqlite_with_invalid_key_falls_back_to_memory(self, tmp_path):
        service = create_service(_settings(
            history_backend="sqlite",
            db_path=str(tmp_path / "vitals.db"),
            encryption_key="not-a-key",
        ))
        assert isinstance(service.store, InMemoryReadingStore)


class TestRecordReading:
    def test_recorded_reading_feeds_recommendations(self, memory_service: InsightService):
        memory_service.record_reading("glucose", 135)
        [insight] = memory_service.get_recommendations()
        assert insight.id == "glucose_management"
        assert insight.tier == "poor"

    def test_override_beats_recorded_history(self, memory_service: InsightService):
        memory_service.record_reading("glucose", 135)
        [insight] = memory_service.get_recommendations({"glucose": 90})
        assert insight.tier == "excellent"

    def test_severity_and_default_unit(self, memory_service: InsightService):
        reading = memory_service.record_reading(MetricType.HEART_RATE, 130)
        assert reading.severity == "warning"
        assert reading.unit == "bpm"

    def test_trend_against_previous(self, memory_service: InsightService):
        first = memory_service.record_reading("heartRate", 72, timestamp="2026-01-14T08:00:00Z")
        second = memory_service.record_reading("heartRate", 80, timestamp="2026-01-15T08:00:00Z")
        third = memory_service.record_reading("heartRate", 80.5, timestamp="2026-01-16T08:00:00Z")
        assert (first.trend, first.trend_value) == ("stable", 0.0)
        assert (second.trend, second.trend_value) == ("up", 8.0)
        assert third.trend == "stable"

    def test_single_symptom_string(self, memory_service: InsightService):
        memory_service.record_reading("stressLevel", 5)
        [insight] = memory_service.get_recommendations(symptoms="anxiety")
        assert insight.tier == "high"

    def test_unknown_metric_rejected(self, memory_service: InsightService):
        with pytest.raises(ValueError, match="Unknown metric"):
            memory_service.record_reading("oxygenSaturation", 97)

    def test_override_store_is_read_only(self, history_store: InMemoryReadingStore):
        service = create_service(_settings(), store_override=history_store)
        with pytest.raises(ValueError, match="No writable"):
            service.record_reading("glucose", 100)


class TestSqliteBackend:
    def test_readings_persist_across_services(self, tmp_path, encryption_key):
        settings = _settings(
            history_backend="sqlite",
            db_path=str(tmp_path / "vitals.db"),
            encryption_key=encryption_key,
        )
        first = create_service(settings)
        first.record_reading("sleepHours", 5.5, notes="late flight")
        first.close()

        second = create_service(settings)
        [insight] = second.get_recommendations()
        assert insight.id == "sleep_optimization"
        assert insight.tier == "poor"
        second.close()

    def test_runs_are_audited(self, sqlite_service: InsightService):
        sqlite_service.record_reading("glucose", 95)
        sqlite_service.get_recommendations(symptoms=["headache"])

        [event] = sqlite_service.audit.get_events(action="insight_run")
        assert event["status"] == "success"
        assert event["insight_ids"] == ["glucose_management"]
        assert len(event["input_hash"]) == 64
        assert event["duration_ms"] >= 0

    def test_failed_runs_are_audited_and_raised(self, sqlite_service: InsightService):
        with pytest.raises(ValueError):
            sqlite_service.get_recommendations(limit=-1)
        [event] = sqlite_service.audit.get_events(action="insight_run")
        assert event["status"] == "failure"
        assert event["error_type"] == "ValueError"

    def test_delete_history(self, sqlite_service: InsightService):
        sqlite_service.record_reading("steps", 4000)
        sqlite_service.record_reading("steps", 6000)
        assert sqlite_service.delete_history() == 2
        assert sqlite_service.get_recommendations() == []
        assert sqlite_service.audit.count_events(action="data_delete") == 1

    def test_delete_history_requires_persistence(self, memory_service: InsightService):
        with pytest.raises(ValueError, match="not persisted"):
            memory_service.delete_history()
