"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackingConfig(BaseModel):
    """Paging and window defaults for the tracking engine.

    Threshold tables are code constants and are not configurable here;
    callers override them per call instead.
    """

    history_page_size: int = Field(default=50, ge=1, le=1000)
    """Default page size for version and analysis history queries."""

    timeline_page_size: int = Field(default=50, ge=1, le=1000)
    """Default page size for the organization change timeline."""

    alert_page_size: int = Field(default=50, ge=1, le=1000)
    """Default page size for alert listings."""

    summary_page_size: int = Field(default=10, ge=1, le=100)
    """Default number of stored change summaries returned."""

    trend_periods: int = Field(default=12, ge=2, le=500)
    """Number of history rows loaded for trend analysis."""

    top_changes_limit: int = Field(default=10, ge=1, le=100)
    """Number of significant versions listed in a change summary."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./chronicle.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_RETRY_ATTEMPTS: int = Field(default=3, ge=1, le=10)

    # Runtime
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Tracking engine
    tracking: TrackingConfig = TrackingConfig()

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
