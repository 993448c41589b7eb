"""
Slot engine configuration.

Policy and engine tunables are read from environment variables (and a .env
file when present) so each tenant/agency can supply its own working policy.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from slot_engine.errors import InputError
from slot_engine.models.entities import WorkingPolicy
from slot_engine.utils.time_utils import TIME_BUCKETS

DEFAULT_TIME_PREFERENCES = {
    "early-morning": 60,
    "morning": 90,
    "early-afternoon": 85,
    "afternoon": 75,
    "late-afternoon": 65,
}

BUFFER_SCOPES = ("commitments", "candidates")

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass
class EngineSettings:
    """Engine tunables that are not part of the working policy."""
    auto_commit_threshold: float = 80.0
    default_commitment_minutes: int = 60
    buffer_scope: str = "commitments"
    time_preferences: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TIME_PREFERENCES))
    enumeration_timeout_seconds: float = 5.0
    max_range_days: int = 92
    max_suggestions: int = 10
    require_full_availability: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.buffer_scope not in BUFFER_SCOPES:
            raise InputError(f"buffer_scope must be one of {BUFFER_SCOPES}, got {self.buffer_scope!r}")
        if self.default_commitment_minutes <= 0:
            raise InputError("default_commitment_minutes must be positive")
        if self.max_range_days < 1:
            raise InputError("max_range_days must be >= 1")
        unknown = set(self.time_preferences) - set(TIME_BUCKETS)
        if unknown:
            raise InputError(f"Unknown time buckets in time_preferences: {sorted(unknown)}")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        preferences = dict(DEFAULT_TIME_PREFERENCES)
        raw_preferences = os.getenv("SLOT_TIME_PREFERENCES", "")
        if raw_preferences:
            try:
                preferences.update({k: float(v) for k, v in json.loads(raw_preferences).items()})
            except (ValueError, AttributeError) as e:
                raise InputError(f"SLOT_TIME_PREFERENCES is not a JSON object of numbers: {e}") from e

        return cls(
            auto_commit_threshold=float(os.getenv("SLOT_AUTO_COMMIT_THRESHOLD", "80")),
            default_commitment_minutes=int(os.getenv("SLOT_DEFAULT_COMMITMENT_MINUTES", "60")),
            buffer_scope=os.getenv("SLOT_BUFFER_SCOPE", "commitments"),
            time_preferences=preferences,
            enumeration_timeout_seconds=float(os.getenv("SLOT_ENUMERATION_TIMEOUT", "5.0")),
            max_range_days=int(os.getenv("SLOT_MAX_RANGE_DAYS", "92")),
            max_suggestions=int(os.getenv("SLOT_MAX_SUGGESTIONS", "10")),
            require_full_availability=os.getenv(
                "SLOT_REQUIRE_FULL_AVAILABILITY", "false"
            ).lower() in ("1", "true", "yes"),
            log_level=os.getenv("SLOT_LOG_LEVEL", "INFO"),
        )


@dataclass
class EngineConfig:
    policy: WorkingPolicy
    settings: EngineSettings


def load_config(env_file: Optional[str] = None) -> EngineConfig:
    """Load policy and settings from a .env file and environment variables."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    settings = EngineSettings.from_env()
    configure_logging(settings.log_level)
    return EngineConfig(policy=WorkingPolicy.from_env(), settings=settings)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
