"""SQLite storage for reading history and the audit trail.

Owns the connection, applies numbered migrations in order, and offers a
``transaction()`` helper so writers commit or roll back as one unit.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Migrations: (version, summary, DDL). Append only; never edit a shipped one.
# ---------------------------------------------------------------------------

_READINGS_DDL = """
CREATE TABLE IF NOT EXISTS vital_readings (
    id           TEXT PRIMARY KEY,
    metric       TEXT NOT NULL,
    value        REAL NOT NULL,
    unit         TEXT NOT NULL DEFAULT '',
    timestamp    TEXT NOT NULL,            -- UTC ISO 8601, sortable as text
    severity     TEXT NOT NULL DEFAULT 'normal',
    trend        TEXT NOT NULL DEFAULT 'stable',
    trend_value  REAL NOT NULL DEFAULT 0,
    notes_enc    TEXT,                     -- Fernet token
    created_at   TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_readings_metric_ts ON vital_readings(metric, timestamp);
"""

_AUDIT_DDL = """
CREATE TABLE IF NOT EXISTS audit_log (
    id            TEXT PRIMARY KEY,
    timestamp     TEXT NOT NULL DEFAULT (datetime('now')),
    action        TEXT NOT NULL,           -- insight_run | data_delete
    input_hash    TEXT,                    -- SHA-256, never the input itself
    insight_ids   TEXT,                    -- JSON list
    duration_ms   REAL,
    status        TEXT NOT NULL DEFAULT 'success',
    error_type    TEXT,
    metadata_json TEXT
);

CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_action    ON audit_log(action);
"""

MIGRATIONS: tuple[tuple[int, str, str], ...] = (
    (1, "vital_readings table", _READINGS_DDL),
    (2, "audit_log table", _AUDIT_DDL),
)

SCHEMA_VERSION = MIGRATIONS[-1][0]


class DatabaseError(Exception):
    """Raised when database operations fail."""


class HealthDatabase:
    """Connection holder for a file-backed or ``:memory:`` SQLite database.

    Usage::

        with HealthDatabase("~/.meditrack/vitals.db") as db:
            with db.transaction() as conn:
                conn.execute("DELETE FROM vital_readings")
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            DatabaseError: If ``initialize()`` has not been called.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and bring the schema up to date. Idempotent."""
        if self._conn is not None:
            return
        try:
            self._conn = self._connect()
            self._migrate()
        except sqlite3.Error as exc:
            self.close()
            raise DatabaseError(f"Cannot open database {self._db_path}: {exc}") from exc
        logger.info("Health database ready: %s (schema v%d)", self._db_path, SCHEMA_VERSION)

    def _connect(self) -> sqlite3.Connection:
        target = self._db_path
        if target != ":memory:":
            path = Path(target).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)
        conn = sqlite3.connect(target)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _migrate(self) -> None:
        conn = self.connection
        conn.execute(
            """CREATE TABLE IF NOT EXISTS schema_version (
                   version    INTEGER NOT NULL,
                   applied_at TEXT NOT NULL DEFAULT (datetime('now'))
               )"""
        )
        current = self.get_schema_version()
        for version, summary, ddl in MIGRATIONS:
            if version <= current:
                continue
            conn.executescript(ddl)
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
            conn.commit()
            logger.info("Applied schema migration V%d: %s", version, summary)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back and re-raise on any error."""
        conn = self.connection
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        conn.commit()

    def get_schema_version(self) -> int:
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Health database closed: %s", self._db_path)

    def __enter__(self) -> HealthDatabase:
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
