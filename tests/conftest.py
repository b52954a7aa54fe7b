"""Shared test fixtures for MediTrack insight tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from meditrack.domains.insights.domain_logic.models import (  # noqa: E402
    MetricType,
    VitalReading,
)
from meditrack.domains.insights.history.in_memory import InMemoryReadingStore  # noqa: E402
from meditrack.domains.insights.reference.loader import (  # noqa: E402
    ReferenceData,
    load_reference_data,
)


# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MEDITRACK_LOG_LEVEL",
        "INSIGHT_LIMIT",
        "TEMPLATES_PATH",
        "HISTORY_BACKEND",
        "SEED_SAMPLE_HISTORY",
        "DB_PATH",
        "ENCRYPTION_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


def _reading(
    metric: MetricType,
    value: float,
    timestamp: str = "2026-01-15T08:00:00Z",
    **kwargs,
) -> VitalReading:
    return VitalReading(type=metric, value=value, unit=kwargs.pop("unit", ""), timestamp=timestamp, **kwargs)


# ---------------------------------------------------------------------------
# Reference data and history
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def reference_data() -> ReferenceData:
    """Packaged thresholds and templates."""
    return load_reference_data()


@pytest.fixture
def empty_store() -> InMemoryReadingStore:
    return InMemoryReadingStore()


@pytest.fixture
def history_store() -> InMemoryReadingStore:
    """A store with a healthy baseline for every metric except sleep."""
    return InMemoryReadingStore([
        _reading(MetricType.HEART_RATE, 70),
        _reading(MetricType.BLOOD_PRESSURE_SYSTOLIC, 115),
        _reading(MetricType.GLUCOSE, 90),
        _reading(MetricType.STRESS_LEVEL, 2),
        _reading(MetricType.WATER_INTAKE, 80),
        _reading(MetricType.STEPS, 11000),
        _reading(MetricType.EXERCISE_MINUTES, 50),
    ])


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def health_db():
    """Create an in-memory HealthDatabase for testing."""
    from meditrack.core.storage.database import HealthDatabase

    db = HealthDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def encryption_key() -> str:
    from cryptography.fernet import Fernet

    return Fernet.generate_key().decode()


@pytest.fixture
def field_encryptor(encryption_key: str):
    """Create a FieldEncryptor with a test key."""
    from meditrack.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(encryption_key)


@pytest.fixture
def reading_repository(health_db, field_encryptor):
    """Create a VitalReadingRepository backed by in-memory SQLite."""
    from meditrack.domains.insights.history.sqlite_store import VitalReadingRepository

    return VitalReadingRepository(health_db, field_encryptor)


@pytest.fixture
def audit_logger(health_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from meditrack.core.audit.logger import AuditLogger

    return AuditLogger(health_db)
