"""Interview slot scheduling and ranking engine."""

from slot_engine.errors import EnumerationTimeout, InputError, SchedulingError
from slot_engine.models.entities import (
    Commitment,
    CommitmentStatus,
    Participant,
    SchedulingConstraints,
    SchedulingRequest,
    SchedulingResult,
    WorkingPolicy,
)
from slot_engine.services.availability import CalendarAvailabilityProbe
from slot_engine.services.commitment_store import InMemoryCommitmentStore
from slot_engine.services.response_formatter import ResponseFormatter
from slot_engine.services.scheduling_engine import SchedulingEngine
from slot_engine.utils.config import EngineSettings, load_config

__version__ = "0.1.0"

__all__ = [
    "CalendarAvailabilityProbe",
    "Commitment",
    "CommitmentStatus",
    "EngineSettings",
    "EnumerationTimeout",
    "InMemoryCommitmentStore",
    "InputError",
    "ResponseFormatter",
    "Participant",
    "SchedulingConstraints",
    "SchedulingEngine",
    "SchedulingError",
    "SchedulingRequest",
    "SchedulingResult",
    "WorkingPolicy",
    "load_config",
]
