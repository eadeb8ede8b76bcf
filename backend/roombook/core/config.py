from dataclasses import dataclass
from datetime import time
from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "Meeting Room Booking API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite:///./roombook.db"
    SECRET_KEY: str = "changeme"
    JWT_ALGORITHM: str = "HS256"
    APP_URL: str = "http://localhost:3000"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Celery configuration
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Rate limiting for the public check-in link
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    CHECKIN_RATE_LIMIT: str = "30/minute"

    # Booking rules
    OFFICE_TIMEZONE: str = "UTC"
    OFFICE_HOURS_START: time = time(9, 0)
    OFFICE_HOURS_END: time = time(20, 0)
    MIN_SLOT_MINUTES: int = 15
    CHECKIN_EARLY_MINUTES: int = 15
    REMINDER_LEAD_MINUTES: int = 30
    MAX_SERIES_OCCURRENCES: int = 180

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def booking_rules(self) -> "BookingRules":
        return BookingRules(
            office_start=self.OFFICE_HOURS_START,
            office_end=self.OFFICE_HOURS_END,
            min_slot_minutes=self.MIN_SLOT_MINUTES,
            checkin_early_minutes=self.CHECKIN_EARLY_MINUTES,
            reminder_lead_minutes=self.REMINDER_LEAD_MINUTES,
            max_series_occurrences=self.MAX_SERIES_OCCURRENCES,
        )


@dataclass(frozen=True)
class BookingRules:
    """Read-only bounds every booking operation is checked against."""

    office_start: time = time(9, 0)
    office_end: time = time(20, 0)
    min_slot_minutes: int = 15
    checkin_early_minutes: int = 15
    reminder_lead_minutes: int = 30
    max_series_occurrences: int = 180


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
