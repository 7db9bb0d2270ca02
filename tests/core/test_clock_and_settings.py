"""Tests for the injectable clock helpers and settings."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from kaamyab.config.settings import Settings, SignalThresholds
from kaamyab.core.clock import FixedClock, elapsed_seconds_between, local_date, to_local


def test_fixed_clock_advances():
    start = datetime(2025, 3, 12, 10, 0, tzinfo=timezone.utc)
    clock = FixedClock(start)
    clock.advance(minutes=5)
    assert clock.now() == start + timedelta(minutes=5)


def test_local_date_uses_reference_zone():
    reference = datetime(2025, 3, 12, 10, 0, tzinfo=timezone(timedelta(hours=5)))
    # 21:00 UTC on the 11th is already the 12th at +05:00
    assert local_date(datetime(2025, 3, 11, 21, 0, tzinfo=timezone.utc), reference).isoformat() == "2025-03-12"


def test_naive_values_are_read_in_reference_zone():
    reference = datetime(2025, 3, 12, 10, 0, tzinfo=timezone(timedelta(hours=5)))
    assert to_local(datetime(2025, 3, 12, 8, 0), reference).tzinfo == reference.tzinfo


def test_elapsed_never_negative():
    now = datetime(2025, 3, 12, 10, 0, tzinfo=timezone.utc)
    assert elapsed_seconds_between(now + timedelta(seconds=10), now) == 0
    assert elapsed_seconds_between(now - timedelta(seconds=10), now) == 10


def test_settings_build_thresholds(test_settings):
    thresholds = test_settings.signal_thresholds()
    assert thresholds == SignalThresholds()
    assert test_settings.streak_revoke_on_reopen is False


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SIGNAL_BURNOUT_MISSED_TASKS", "5")
    monkeypatch.setenv("STREAK_REVOKE_ON_REOPEN", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configured = Settings(_env_file=None)

    assert configured.signal_thresholds().burnout_missed_tasks == 5
    assert configured.streak_revoke_on_reopen is True
    assert configured.log_level == "DEBUG"


def test_invalid_log_level_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "loud")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
