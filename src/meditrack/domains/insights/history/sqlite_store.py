"""SQLite reading store — append-only vital history with encrypted notes.

Implements ``HistoricalReadingStore`` so it can be handed straight to the
insight engine. Writes go through ``append``; the engine only calls
``latest_by_type``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from meditrack.core.storage.database import HealthDatabase
from meditrack.core.storage.encryption import FieldEncryptor
from meditrack.domains.insights.domain_logic.models import MetricType, VitalReading
from meditrack.domains.insights.history.in_memory import parse_timestamp

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


def _utc_iso(value: str) -> str:
    return parse_timestamp(value).astimezone(timezone.utc).isoformat(timespec="microseconds")


class VitalReadingRepository:
    """Reading history stored in SQLite.

    Timestamps are normalized to UTC ISO 8601 on write so that string order
    in the ``(metric, timestamp)`` index matches chronological order.

    Usage::

        db = HealthDatabase(":memory:")
        db.initialize()
        repo = VitalReadingRepository(db, FieldEncryptor(key))

        repo.append(reading)
        repo.latest_by_type(MetricType.HEART_RATE)
    """

    def __init__(self, database: HealthDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append(self, reading: VitalReading) -> str:
        """Persist a reading and return its id (generated when empty).

        Raises:
            RepositoryError: If the timestamp is not ISO 8601 or the value
                is not numeric.
        """
        try:
            ts = _utc_iso(reading.timestamp)
        except (AttributeError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Invalid reading timestamp {reading.timestamp!r}") from exc
        if isinstance(reading.value, bool) or not isinstance(reading.value, (int, float)):
            raise RepositoryError(f"Reading value must be numeric, got {reading.value!r}")

        try:
            metric = MetricType(reading.type).value
        except ValueError as exc:
            raise RepositoryError(f"Unknown metric type {reading.type!r}") from exc

        rid = reading.id or self._new_id()
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO vital_readings
                   (id, metric, value, unit, timestamp, severity, trend, trend_value, notes_enc)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    rid,
                    metric,
                    float(reading.value),
                    reading.unit,
                    ts,
                    reading.severity,
                    reading.trend,
                    reading.trend_value,
                    self._enc.encrypt(reading.notes) or None,
                ),
            )
        logger.debug("Stored %s reading %s", metric, rid)
        return rid

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def latest_by_type(self, metric: MetricType) -> VitalReading | None:
        row = self._db.connection.execute(
            """SELECT * FROM vital_readings WHERE metric = ?
               ORDER BY timestamp DESC, created_at DESC, rowid DESC LIMIT 1""",
            (MetricType(metric).value,),
        ).fetchone()
        return self._row_to_reading(row) if row else None

    def history(self, metric: MetricType, *, limit: int = 30) -> list[VitalReading]:
        """Readings of ``metric``, newest first."""
        rows = self._db.connection.execute(
            """SELECT * FROM vital_readings WHERE metric = ?
               ORDER BY timestamp DESC, rowid DESC LIMIT ?""",
            (MetricType(metric).value, limit),
        ).fetchall()
        return [self._row_to_reading(row) for row in rows]

    def count(self, metric: MetricType | None = None) -> int:
        if metric is None:
            row = self._db.connection.execute("SELECT COUNT(*) FROM vital_readings").fetchone()
        else:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM vital_readings WHERE metric = ?",
                (MetricType(metric).value,),
            ).fetchone()
        return row[0]

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def purge_before(self, before_timestamp: str) -> int:
        """Delete readings with ``timestamp < before_timestamp``; return the count."""
        cutoff = _utc_iso(before_timestamp)
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM vital_readings WHERE timestamp < ?", (cutoff,))
        logger.info("Purged %d readings older than %s", cursor.rowcount, cutoff)
        return cursor.rowcount

    def purge_before_days(self, days: int) -> int:
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        return self.purge_before(cutoff)

    def delete_all(self) -> int:
        """Delete every stored reading."""
        with self._db.transaction() as conn:
            cursor = conn.execute("DELETE FROM vital_readings")
        logger.warning("Deleted ALL reading history: %d readings removed", cursor.rowcount)
        return cursor.rowcount

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _row_to_reading(self, row: Any) -> VitalReading:
        return VitalReading(
            id=row["id"],
            type=MetricType(row["metric"]),
            value=row["value"],
            unit=row["unit"],
            timestamp=row["timestamp"],
            severity=row["severity"],
            trend=row["trend"],
            trend_value=row["trend_value"],
            notes=self._enc.decrypt(row["notes_enc"] or ""),
        )
