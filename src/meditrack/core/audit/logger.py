"""Audit trail for insight runs and history deletions.

Rows never carry health values: an engine run is recorded as the SHA-256 of
its canonical JSON input, the insight ids it returned and how long it took.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from meditrack.core.storage.database import HealthDatabase

logger = logging.getLogger(__name__)

INSIGHT_RUN = "insight_run"
DATA_DELETE = "data_delete"


def _hash_input(data: Any) -> str:
    """Hex SHA-256 of ``data`` as sorted compact JSON ("" if not serializable)."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return ""
    return hashlib.sha256(canonical.encode()).hexdigest()


@dataclass
class AuditEvent:
    action: str
    input_hash: str = ""
    insight_ids: list[str] = field(default_factory=list)
    duration_ms: float | None = None
    status: str = "success"  # or 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_row(self, event_id: str, timestamp: str) -> tuple[Any, ...]:
        return (
            event_id,
            timestamp,
            self.action,
            self.input_hash or None,
            json.dumps(self.insight_ids) if self.insight_ids else None,
            self.duration_ms,
            self.status,
            self.error_type,
            json.dumps(self.metadata, separators=(",", ":")) if self.metadata else None,
        )


class AuditLogger:
    """Appends events to ``audit_log`` and queries them back.

    An audit write that fails is logged and reported as an empty id; it
    never propagates into the engine run being audited.

    Usage::

        audit = AuditLogger(db)
        audit.log_insight_run({"vitals": {"heartRate": 72}}, ["cardiovascular_health"],
                              duration_ms=0.4)
        audit.get_events(action="insight_run", limit=10)
    """

    def __init__(self, database: HealthDatabase) -> None:
        self._db = database

    def log_event(self, event: AuditEvent) -> str:
        """Persist ``event``; return its UUID, or "" if the write failed."""
        event_id = str(uuid.uuid4())
        row = event.to_row(event_id, datetime.now(timezone.utc).isoformat())
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    """INSERT INTO audit_log
                       (id, timestamp, action, input_hash, insight_ids,
                        duration_ms, status, error_type, metadata_json)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    row,
                )
        except Exception:
            logger.exception("Audit write failed for action=%s; event dropped", event.action)
            return ""
        return event_id

    def log_insight_run(
        self,
        request: Any = None,
        insight_ids: list[str] | None = None,
        *,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        return self.log_event(AuditEvent(
            action=INSIGHT_RUN,
            input_hash=_hash_input(request) if request else "",
            insight_ids=list(insight_ids or ()),
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=dict(metadata or {}),
        ))

    def log_data_delete(self, *, count: int = 0, metadata: dict[str, Any] | None = None) -> str:
        return self.log_event(AuditEvent(
            action=DATA_DELETE,
            metadata={**(metadata or {}), "records_deleted": count},
        ))

    def get_events(
        self,
        *,
        action: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Events newest first, optionally filtered by action and start time."""
        clauses = {"action = ?": action, "timestamp >= ?": since}
        active = {clause: value for clause, value in clauses.items() if value}
        where = f" WHERE {' AND '.join(active)}" if active else ""

        rows = self._db.connection.execute(
            f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?",
            [*active.values(), limit],
        ).fetchall()
        return [
            {**dict(row), "insight_ids": json.loads(row["insight_ids"] or "[]")}
            for row in rows
        ]

    def count_events(self, *, action: str | None = None) -> int:
        query, params = "SELECT COUNT(*) FROM audit_log", ()
        if action:
            query, params = query + " WHERE action = ?", (action,)
        return self._db.connection.execute(query, params).fetchone()[0]
