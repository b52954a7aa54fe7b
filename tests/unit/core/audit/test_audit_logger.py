"""Tests for the AuditLogger and related utilities."""

from __future__ import annotations

import json
import time

from meditrack.core.audit.logger import AuditEvent, AuditLogger, _hash_input
from meditrack.core.storage.database import HealthDatabase


class TestHashInput:
    def test_sha256_hex(self):
        assert len(_hash_input({"vitals": {"heartRate": 72}})) == 64

    def test_key_order_independent(self):
        assert _hash_input({"z": 1, "a": 2}) == _hash_input({"a": 2, "z": 1})

    def test_different_inputs_differ(self):
        assert _hash_input({"heartRate": 72}) != _hash_input({"heartRate": 73})

    def test_non_serializable_returns_empty(self):
        assert _hash_input(object()) == ""


class TestLogInsightRun:
    def test_returns_uuid(self, audit_logger: AuditLogger):
        eid = audit_logger.log_insight_run({"vitals": {"glucose": 95}}, ["glucose_management"])
        assert len(eid) == 36

    def test_stores_hash_not_input(self, audit_logger: AuditLogger, health_db: HealthDatabase):
        audit_logger.log_insight_run(
            {"vitals": {"glucose": 187}},
            ["glucose_management"],
            duration_ms=0.7,
        )
        [event] = audit_logger.get_events()
        assert event["action"] == "insight_run"
        assert len(event["input_hash"]) == 64
        assert event["insight_ids"] == ["glucose_management"]
        assert event["duration_ms"] == 0.7
        assert event["status"] == "success"

        dump = "".join(str(v) for v in health_db.connection.execute("SELECT * FROM audit_log").fetchone())
        assert "vitals" not in dump

    def test_failure_recorded(self, audit_logger: AuditLogger):
        audit_logger.log_insight_run({"limit": -1}, status="failure", error_type="ValueError")
        [event] = audit_logger.get_events()
        assert event["status"] == "failure"
        assert event["error_type"] == "ValueError"
        assert event["insight_ids"] == []

    def test_metadata_json_stored(self, audit_logger: AuditLogger):
        audit_logger.log_event(AuditEvent(action="insight_run", metadata={"limit": 3}))
        [event] = audit_logger.get_events()
        assert json.loads(event["metadata_json"]) == {"limit": 3}


class TestLogDataDelete:
    def test_records_count(self, audit_logger: AuditLogger):
        audit_logger.log_data_delete(count=12)
        [event] = audit_logger.get_events(action="data_delete")
        assert json.loads(event["metadata_json"])["records_deleted"] == 12


class TestWriteFailure:
    def test_closed_database_returns_empty_id(self, health_db: HealthDatabase):
        audit = AuditLogger(health_db)
        health_db.close()
        assert audit.log_insight_run({"vitals": {}}) == ""


class TestGetEvents:
    def test_filter_by_action(self, audit_logger: AuditLogger):
        audit_logger.log_insight_run({"a": 1})
        audit_logger.log_data_delete(count=5)
        audit_logger.log_insight_run({"a": 2})

        assert len(audit_logger.get_events(action="insight_run")) == 2
        assert len(audit_logger.get_events(action="data_delete")) == 1

    def test_since_filter(self, audit_logger: AuditLogger):
        audit_logger.log_insight_run({"a": 1})
        assert len(audit_logger.get_events(since="2020-01-01T00:00:00Z")) == 1
        assert audit_logger.get_events(since="2999-01-01T00:00:00Z") == []

    def test_limit_respected(self, audit_logger: AuditLogger):
        for i in range(5):
            audit_logger.log_insight_run({"i": i})
        assert len(audit_logger.get_events(limit=3)) == 3

    def test_newest_first(self, audit_logger: AuditLogger):
        audit_logger.log_insight_run({"i": 1}, ["first"])
        time.sleep(0.01)
        audit_logger.log_insight_run({"i": 2}, ["second"])
        events = audit_logger.get_events()
        assert [e["insight_ids"] for e in events] == [["second"], ["first"]]


class TestCounts:
    def test_count_events(self, audit_logger: AuditLogger):
        assert audit_logger.count_events() == 0
        audit_logger.log_insight_run({"a": 1})
        audit_logger.log_data_delete(count=1)
        assert audit_logger.count_events() == 2
        assert audit_logger.count_events(action="data_delete") == 1
