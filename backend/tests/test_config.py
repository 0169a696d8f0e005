"""Tests for scheduler settings loaded from the environment."""

import pytest

from cardcoach.config import get_scheduler_config, get_scheduler_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("SRS_MASTERY_STREAK", raising=False)
    monkeypatch.delenv("SRS_DIFFICULT_THRESHOLD", raising=False)
    monkeypatch.delenv("PRACTICE_SESSION_TTL_SECONDS", raising=False)

    settings = get_scheduler_settings()

    assert settings.mastery_streak == 2
    assert settings.difficult_threshold == 2
    assert settings.session_ttl_seconds == 1800


def test_from_environment(monkeypatch):
    monkeypatch.setenv("SRS_MASTERY_STREAK", "1")
    monkeypatch.setenv("SRS_DIFFICULT_THRESHOLD", "3")
    monkeypatch.setenv("PRACTICE_SESSION_TTL_SECONDS", "90")

    config = get_scheduler_config()

    assert config.mastery_streak == 1
    assert config.difficult_threshold == 3
    assert get_scheduler_settings().session_ttl_seconds == 90


def test_non_integer_value_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("SRS_MASTERY_STREAK", "lots")

    assert get_scheduler_settings().mastery_streak == 2
    assert "SRS_MASTERY_STREAK" in caplog.text


def test_settings_are_cached(monkeypatch):
    monkeypatch.setenv("SRS_MASTERY_STREAK", "3")
    first = get_scheduler_settings()
    monkeypatch.setenv("SRS_MASTERY_STREAK", "5")

    assert get_scheduler_settings() is first


@pytest.mark.parametrize(
    "name, value, field, default",
    [
        ("SRS_MASTERY_STREAK", "0", "mastery_streak", 2),
        ("SRS_DIFFICULT_THRESHOLD", "9", "difficult_threshold", 2),
        ("SRS_DIFFICULT_THRESHOLD", "0", "difficult_threshold", 2),
        ("PRACTICE_SESSION_TTL_SECONDS", "-5", "session_ttl_seconds", 1800),
    ],
)
def test_out_of_range_value_falls_back(monkeypatch, caplog, name, value, field, default):
    monkeypatch.setenv(name, value)

    assert getattr(get_scheduler_settings(), field) == default
    assert name in caplog.text


def test_bad_value_keeps_other_settings(monkeypatch):
    monkeypatch.setenv("SRS_MASTERY_STREAK", "0")
    monkeypatch.setenv("SRS_DIFFICULT_THRESHOLD", "3")

    config = get_scheduler_config()

    assert config.mastery_streak == 2
    assert config.difficult_threshold == 3
