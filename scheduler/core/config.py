"""Application configuration via Pydantic settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration object loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Practice Scheduler API"
    debug: bool = False
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field("sqlite+aiosqlite:///./scheduler.db", alias="DATABASE_URL")
    # Queries slower than this are logged; 0 disables the timer.
    slow_query_threshold_seconds: float = Field(1.0, alias="DB_SLOW_QUERY_SECONDS", ge=0)

    # Aware datetimes are converted to this zone and stored as naive wall-clock time.
    default_timezone: str = Field("UTC", alias="DEFAULT_TIMEZONE")
    slot_granularity_minutes: int = Field(15, alias="SLOT_GRANULARITY_MINUTES", gt=0)
    default_buffer_minutes: int = Field(15, alias="DEFAULT_BUFFER_MINUTES", ge=0)
    reminder_lead_hours: int = Field(24, alias="REMINDER_LEAD_HOURS", gt=0)


@lru_cache(1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()
