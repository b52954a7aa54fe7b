"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """MediTrack insight engine configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    meditrack_log_level: str = "info"

    # Engine
    insight_limit: int = 3
    # Empty means the packaged insight_templates.yaml
    templates_path: str = ""

    # Reading history
    history_backend: Literal["memory", "sqlite"] = "memory"
    seed_sample_history: bool = False
    db_path: str = "~/.meditrack/vitals.db"

    # Encryption of free-text reading notes. Required for the sqlite backend.
    encryption_key: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
