"""
Shared Configuration Module

Centralized configuration management for the registrar services using Pydantic Settings.
Supports environment variables, .env files, and runtime overrides.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(default=True, description="Enable debug mode")
    service_name: str = "campus-registrar"

    @property
    def is_development(self) -> bool:
        """Whether the service runs in development mode."""
        return self.environment == "development"

    # Event bus
    event_bus_async: bool = Field(
        default=False,
        description="Dispatch notifications on a worker thread instead of the publisher's",
    )
    event_bus_workers: int = Field(default=1, ge=1)
    event_history_limit: int | None = Field(
        default=1000, ge=0, description="Notifications kept in bus history (None = unlimited)"
    )

    # Concurrency
    lock_wait_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for a course/student lock (None = wait forever)",
    )

    # Grading
    valid_grade_letters: list[str] = Field(
        default_factory=lambda: ["A", "B", "C", "D", "F", "P"]
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton
    """
    return Settings()


# Convenience exports
settings = get_settings()
