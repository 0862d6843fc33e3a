from __future__ import annotations

from pydantic import ValidationError
import pytest

from mentorbook.api.dependencies import services as service_deps
from mentorbook.core.config import Settings, settings
from mentorbook.integrations.calendar_client import HttpCalendarClient, NullCalendarProvider


def test_defaults() -> None:
    config = Settings(_env_file=None)

    assert config.default_timezone == "UTC"
    assert config.slot_default_duration_minutes == 60
    assert config.slot_min_step_minutes == 5
    assert config.booking_default_duration_minutes == 50
    assert config.commit_calendar_timeout == 2.0


def test_strict_booking_check_uses_booking_timeout() -> None:
    config = Settings(_env_file=None, calendar_strict_booking_check=True)

    assert config.commit_calendar_timeout == 5.0


def test_blank_calendar_url_disables_gateway() -> None:
    config = Settings(_env_file=None, calendar_api_base_url="   ")

    assert config.calendar_api_base_url is None
    assert not config.calendar_enabled


def test_slot_minimums_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, slot_min_step_minutes=0)


def test_calendar_provider_follows_configuration(monkeypatch) -> None:
    service_deps._calendar_provider_singleton.cache_clear()
    monkeypatch.setattr(settings, "calendar_api_base_url", None)
    assert isinstance(service_deps.get_calendar_provider(), NullCalendarProvider)

    service_deps._calendar_provider_singleton.cache_clear()
    monkeypatch.setattr(settings, "calendar_api_base_url", "https://calendar-gateway.test")
    assert isinstance(service_deps.get_calendar_provider(), HttpCalendarClient)

    service_deps._calendar_provider_singleton.cache_clear()
