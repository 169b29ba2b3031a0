"""
Configuration settings for the quizloop question engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

import sys
from functools import lru_cache

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from QUIZLOOP_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZLOOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Staged rollout
    # ========================================
    disabled_types: str = Field(
        default="",
        description="Comma-separated question types to disable after registration",
    )
    production_types: str = Field(
        default="",
        description="Comma-separated question types to mark production-ready",
    )

    # ========================================
    # Scoring
    # ========================================
    heuristic_answer_scan: bool = Field(
        default=True,
        description="Scan unknown response fields for answer arrays when grading completion questions",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Minimum loguru level for the stderr sink",
    )

    def get_disabled_types(self) -> list[str]:
        return [t.strip() for t in self.disabled_types.split(",") if t.strip()]

    def get_production_types(self) -> list[str]:
        return [t.strip() for t in self.production_types.split(",") if t.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or get_settings().log_level).upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
