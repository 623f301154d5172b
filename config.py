"""
Configuration settings for the speed-reading exercise engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///speed_reading.db",
        description="SQLAlchemy connection string for attempt/exercise storage",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default="logs/speed_reading.log",
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Attempt Lifecycle
    # ========================================
    sweep_interval_seconds: int = Field(
        default=60,
        ge=1,
        description="Interval between expired-attempt sweeps",
    )
    default_time_limit_minutes: int = Field(
        default=30,
        gt=0,
        description="Time limit for exercises without an attached reading text",
    )
    default_passing_score: int = Field(
        default=60,
        ge=0,
        le=100,
        description="Passing percentage for new exercises",
    )
    default_max_retries: int = Field(
        default=3,
        ge=0,
        description="Completed attempts allowed per user and exercise",
    )

    # ========================================
    # Text Analysis
    # ========================================
    keyword_count: int = Field(
        default=10,
        gt=0,
        description="Keywords extracted per reading text",
    )
    summary_max_length: int = Field(
        default=200,
        gt=3,
        description="Maximum characters in the extractive summary",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
