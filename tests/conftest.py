"""Shared fixtures for the slot engine tests."""

from datetime import date, datetime, timedelta

import pytest

from slot_engine.models.entities import (
    Commitment,
    CommitmentStatus,
    Participant,
    SchedulingRequest,
    WorkingPolicy,
)
from slot_engine.services.availability import CalendarAvailabilityProbe
from slot_engine.utils.config import EngineSettings

# A Monday
MONDAY = date(2026, 10, 19)
SATURDAY = date(2026, 10, 24)


@pytest.fixture
def policy() -> WorkingPolicy:
    return WorkingPolicy(
        work_start="09:00",
        work_end="17:00",
        break_start="12:00",
        break_end="13:00",
        buffer_minutes=15,
    )


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def interviewer() -> Participant:
    return Participant(id="int-1", name="Sita Sharma")


@pytest.fixture
def empty_probe(policy) -> CalendarAvailabilityProbe:
    return CalendarAvailabilityProbe(tz=policy.tz)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """Naive local datetime; the engine reads it in the policy timezone."""
    return datetime(day.year, day.month, day.day, hour, minute)


def monday_history(weeks: int = 4) -> list[Commitment]:
    """Completed 10:00 interviews on the Mondays before ``MONDAY``."""
    return [
        Commitment(
            start=at(MONDAY - timedelta(weeks=k), 10),
            duration_minutes=60,
            status=CommitmentStatus.COMPLETED,
        )
        for k in range(1, weeks + 1)
    ]


def make_request(participants, day: date = MONDAY, duration: int = 60, end_day: date = None, **kwargs):
    return SchedulingRequest(
        duration_minutes=duration,
        participants=list(participants),
        date_range_start=day,
        date_range_end=end_day or day,
        **kwargs,
    )
