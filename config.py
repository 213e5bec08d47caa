"""
Configuration settings for the QueryUp mentorship ledger.

Uses Pydantic Settings for environment variable management with .env file support.
Every setting can be overridden with a ``QUERYUP_`` prefixed environment variable,
e.g. ``QUERYUP_DATA_DIR=/tmp/queryup``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUERYUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Institution
    # ========================================
    institution_domain: str = Field(
        default="@pccoepune.org",
        description="Required email suffix for every account",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".queryup",
        description="Directory holding the state snapshot and the CLI identity file",
    )
    state_file: str = Field(
        default="state.json",
        description="Snapshot file name inside data_dir",
    )
    identity_file: str = Field(
        default="identity.json",
        description="File remembering the active identity between CLI invocations",
    )
    storage_key: str = Field(
        default="queryup_state_v1",
        description="Top-level key the snapshot is stored under",
    )

    # ========================================
    # Scheduling
    # ========================================
    session_offset_minutes: int = Field(
        default=60,
        description="Minutes between accepting a query and the scheduled session",
    )
    online_meeting_link: str = Field(
        default="https://meet.google.com/example",
        description="Placeholder link used for online sessions",
    )
    offline_location: str = Field(
        default="PCCOE Library",
        description="Placeholder location used for offline sessions",
    )
    strict_session_guards: bool = Field(
        default=False,
        description=(
            "Reject outcome changes on settled sessions, outcomes before the scheduled "
            "time, ratings on non-completed sessions and re-ratings"
        ),
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Loguru level for the CLI sink",
    )

    @property
    def state_path(self) -> Path:
        """Full path of the persisted snapshot."""
        return self.data_dir / self.state_file

    @property
    def identity_path(self) -> Path:
        """Full path of the remembered CLI identity."""
        return self.data_dir / self.identity_file


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
