"""Tests for environment-driven configuration."""

from datetime import time

import pytest

from slot_engine.errors import InputError
from slot_engine.models.entities import WorkingPolicy
from slot_engine.utils.config import (
    DEFAULT_TIME_PREFERENCES,
    EngineSettings,
    load_config,
)


def test_policy_defaults_from_empty_env(monkeypatch):
    for name in ("SLOT_WORK_START", "SLOT_WORK_END", "SLOT_TIMEZONE", "SLOT_BUFFER_MINUTES"):
        monkeypatch.delenv(name, raising=False)

    policy = WorkingPolicy.from_env()

    assert policy.work_start == time(9, 0)
    assert policy.work_end == time(17, 0)
    assert policy.buffer_minutes == 15
    assert policy.max_meetings_per_day == 8
    assert policy.timezone == "Asia/Kathmandu"


def test_policy_from_env(monkeypatch):
    monkeypatch.setenv("SLOT_WORK_START", "08:30")
    monkeypatch.setenv("SLOT_WORK_END", "16:00")
    monkeypatch.setenv("SLOT_BREAK_START", "13:00")
    monkeypatch.setenv("SLOT_BREAK_END", "13:30")
    monkeypatch.setenv("SLOT_TIMEZONE", "Asia/Dubai")
    monkeypatch.setenv("SLOT_MAX_MEETINGS_PER_DAY", "4")

    policy = WorkingPolicy.from_env()

    assert policy.work_start == time(8, 30)
    assert policy.break_end == time(13, 30)
    assert policy.max_meetings_per_day == 4
    assert policy.tz.zone == "Asia/Dubai"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SLOT_AUTO_COMMIT_THRESHOLD", "85")
    monkeypatch.setenv("SLOT_BUFFER_SCOPE", "candidates")
    monkeypatch.setenv("SLOT_TIME_PREFERENCES", '{"late-afternoon": 95}')
    monkeypatch.setenv("SLOT_MAX_SUGGESTIONS", "5")

    settings = EngineSettings.from_env()

    assert settings.auto_commit_threshold == 85.0
    assert settings.buffer_scope == "candidates"
    assert settings.max_suggestions == 5
    # overrides merge into the default table
    assert settings.time_preferences["late-afternoon"] == 95.0
    assert settings.time_preferences["morning"] == DEFAULT_TIME_PREFERENCES["morning"]


def test_malformed_time_preferences(monkeypatch):
    monkeypatch.setenv("SLOT_TIME_PREFERENCES", "not json")
    with pytest.raises(InputError):
        EngineSettings.from_env()


def test_unknown_buffer_scope():
    with pytest.raises(InputError):
        EngineSettings(buffer_scope="everything")


def test_unknown_time_bucket_preference():
    with pytest.raises(InputError):
        EngineSettings(time_preferences={"midnight": 100})


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    # Registered so the value written by the .env file is removed afterwards
    monkeypatch.setenv("SLOT_WORK_START", "")
    monkeypatch.delenv("SLOT_WORK_START")
    monkeypatch.setenv("SLOT_BUFFER_SCOPE", "commitments")

    env_file = tmp_path / ".env"
    env_file.write_text("SLOT_WORK_START=10:00\nSLOT_BUFFER_SCOPE=candidates\n")

    config = load_config(str(env_file))

    assert config.policy.work_start == time(10, 0)
    # real environment variables win over the file
    assert config.settings.buffer_scope == "commitments"


@pytest.mark.parametrize("kwargs", [
    {"work_start": "17:00", "work_end": "09:00"},
    {"break_start": "13:00", "break_end": "12:00"},
    {"work_start": "9am"},
    {"timezone": "Mars/Olympus"},
    {"buffer_minutes": -5},
    {"max_meetings_per_day": 0},
])
def test_invalid_policy(kwargs):
    with pytest.raises(InputError):
        WorkingPolicy(**kwargs)


def test_full_availability_flag_from_env(monkeypatch):
    monkeypatch.setenv("SLOT_REQUIRE_FULL_AVAILABILITY", "true")
    assert EngineSettings.from_env().require_full_availability
    monkeypatch.setenv("SLOT_REQUIRE_FULL_AVAILABILITY", "0")
    assert not EngineSettings.from_env().require_full_availability
