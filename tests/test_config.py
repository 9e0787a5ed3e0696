"""Tests for application settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hrnotify.config import Settings


def test_defaults_match_reference_timers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SWEEP_INTERVAL_SECONDS", raising=False)
    monkeypatch.delenv("IDLE_TIMEOUT_SECONDS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.sweep_interval_seconds == 30
    assert settings.idle_timeout_seconds == 300
    assert settings.notification_retention_days == 30
    assert settings.secondary_channel_enabled is True


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IDLE_TIMEOUT_SECONDS", "120")
    monkeypatch.setenv("SECONDARY_CHANNEL_ENABLED", "false")

    settings = Settings(_env_file=None)

    assert settings.idle_timeout_seconds == 120
    assert settings.secondary_channel_enabled is False


def test_sendgrid_settings_must_be_paired() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, sendgrid_api_key="SG.key")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, sendgrid_api_key="SG.key", sendgrid_sender="not-an-address")

    settings = Settings(
        _env_file=None, sendgrid_api_key="SG.key", sendgrid_sender="hr@example.com"
    )
    assert settings.sendgrid_sender == "hr@example.com"
