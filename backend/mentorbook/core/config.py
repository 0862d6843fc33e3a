# backend/mentorbook/core/config.py
import logging
import os
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Auth
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-me"),
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"

    # Database
    database_url: str = Field(
        default="sqlite:///./mentorbook.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = False

    # Scheduling
    default_timezone: str = Field(
        default="UTC", description="Fallback timezone for mentors without one"
    )
    slot_default_duration_minutes: int = 60
    slot_min_duration_minutes: int = 15
    slot_default_step_minutes: int = 60
    slot_min_step_minutes: int = 5
    booking_default_duration_minutes: int = 50
    max_slot_window_days: int = Field(
        default=62, description="Largest [from, to) window accepted by the slot query"
    )

    # External calendar gateway (OAuth handled by the gateway)
    calendar_api_base_url: Optional[str] = Field(
        default=None,
        alias="CALENDAR_API_BASE_URL",
        description="Base URL of the calendar gateway; unset disables calendar integration",
    )
    calendar_api_key: Optional[SecretStr] = Field(default=None, alias="CALENDAR_API_KEY")
    calendar_timeout_seconds: float = Field(
        default=2.0, description="Timeout for free/busy lookups during slot generation"
    )
    calendar_booking_timeout_seconds: float = Field(
        default=5.0, description="Timeout for free/busy lookups at booking commit"
    )
    calendar_strict_booking_check: bool = Field(
        default=False,
        description="Use the longer booking timeout for the commit-time availability check",
    )

    # Notifications
    notifications_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("calendar_api_base_url", mode="before")
    @classmethod
    def _blank_calendar_url_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("slot_min_duration_minutes", "slot_min_step_minutes")
    @classmethod
    def _positive_minimum(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("slot minimums must be positive")
        return value

    @property
    def calendar_enabled(self) -> bool:
        return bool(self.calendar_api_base_url)

    @property
    def commit_calendar_timeout(self) -> float:
        if self.calendar_strict_booking_check:
            return self.calendar_booking_timeout_seconds
        return self.calendar_timeout_seconds


settings = Settings()
