"""Settings loaded from the environment (``POWER_PERIODS_*``) or a ``.env`` file."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from power_periods.window import DEFAULT_UTC_OFFSET_HOURS

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="POWER_PERIODS_", env_file=".env", extra="ignore"
    )

    events_file: Path = Path("data/events.json")
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS
    cache_ttl_seconds: float = 30.0
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def get_settings() -> Settings:
    return Settings()
