"""Domain models for the slot engine."""

import os
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional

from slot_engine.errors import InputError
from slot_engine.utils.time_utils import as_date, get_timezone, parse_time


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class WorkingPolicy:
    """Working-time policy for one scheduling run (one per tenant/agency)."""
    work_start: time = time(9, 0)
    work_end: time = time(17, 0)
    break_start: time = time(12, 0)
    break_end: time = time(13, 0)
    buffer_minutes: int = 15
    max_meetings_per_day: int = 8
    preferred_duration_minutes: int = 60
    slot_granularity_minutes: int = 30
    timezone: str = "Asia/Kathmandu"

    def __post_init__(self):
        for name in ("work_start", "work_end", "break_start", "break_end"):
            object.__setattr__(self, name, parse_time(getattr(self, name)))

        if self.work_start >= self.work_end:
            raise InputError("Working hours must start before they end")
        if self.break_start > self.break_end:
            raise InputError("Break must start before it ends")
        if self.buffer_minutes < 0:
            raise InputError("buffer_minutes must be >= 0")
        if self.max_meetings_per_day < 1:
            raise InputError("max_meetings_per_day must be >= 1")
        if self.preferred_duration_minutes <= 0:
            raise InputError("preferred_duration_minutes must be positive")
        if self.slot_granularity_minutes <= 0:
            raise InputError("slot_granularity_minutes must be positive")
        get_timezone(self.timezone)

    @property
    def tz(self):
        return get_timezone(self.timezone)

    @classmethod
    def from_env(cls) -> "WorkingPolicy":
        return cls(
            work_start=os.getenv("SLOT_WORK_START", "09:00"),
            work_end=os.getenv("SLOT_WORK_END", "17:00"),
            break_start=os.getenv("SLOT_BREAK_START", "12:00"),
            break_end=os.getenv("SLOT_BREAK_END", "13:00"),
            buffer_minutes=int(os.getenv("SLOT_BUFFER_MINUTES", "15")),
            max_meetings_per_day=int(os.getenv("SLOT_MAX_MEETINGS_PER_DAY", "8")),
            preferred_duration_minutes=int(os.getenv("SLOT_PREFERRED_DURATION", "60")),
            slot_granularity_minutes=int(os.getenv("SLOT_GRANULARITY_MINUTES", "30")),
            timezone=os.getenv("SLOT_TIMEZONE", "Asia/Kathmandu"),
        )


class CommitmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


@dataclass
class Commitment:
    """An already-booked meeting occupying time on the schedule."""
    start: datetime
    end: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    status: CommitmentStatus = CommitmentStatus.SCHEDULED
    outcome: Optional[str] = None
    participant_ids: tuple[str, ...] = ()
    title: str = ""
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        self.status = CommitmentStatus(self.status)
        self.participant_ids = tuple(self.participant_ids)

    def resolved_end(self, default_minutes: int = 60) -> datetime:
        """End time, falling back to the duration and then to ``default_minutes``."""
        if self.end is not None:
            return self.end
        minutes = self.duration_minutes if self.duration_minutes else default_minutes
        return self.start + timedelta(minutes=minutes)

    @property
    def blocks_time(self) -> bool:
        return self.status != CommitmentStatus.CANCELLED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Commitment":
        """Build a commitment from a loosely-shaped record of the booking layer."""
        start = data.get("start") or data.get("scheduled_at") or data.get("scheduledAt")
        end = data.get("end") or data.get("end_time") or data.get("endTime")
        if start is None:
            raise InputError("Commitment record has no start time")
        if isinstance(start, str):
            start = datetime.fromisoformat(start)
        if isinstance(end, str):
            end = datetime.fromisoformat(end)
        return cls(
            start=start,
            end=end,
            duration_minutes=data.get("duration_minutes") or data.get("duration"),
            status=data.get("status", CommitmentStatus.SCHEDULED),
            outcome=data.get("outcome"),
            participant_ids=tuple(data.get("participant_ids", ())),
            title=data.get("title", ""),
            id=data.get("id") or _new_id(),
        )


@dataclass(frozen=True)
class Participant:
    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Participant":
        return cls(id=str(data["id"]), name=data.get("name", ""))


@dataclass(frozen=True)
class ParticipantAvailability:
    """Availability of one participant for one candidate slot."""
    participant_id: str
    name: str
    available: bool
    conflicts: tuple[str, ...] = ()


SLOT_LABELS = (
    (90, "excellent"),
    (80, "very-good"),
    (70, "good"),
    (60, "fair"),
)


def score_label(score: float) -> str:
    for threshold, label in SLOT_LABELS:
        if score >= threshold:
            return label
    return "poor"


@dataclass(frozen=True)
class ScoreBreakdown:
    """Raw factor sub-scores (0-100) and the weights applied to them."""
    factors: dict[str, float]
    weights: dict[str, float]

    @property
    def total(self) -> float:
        return round(sum(self.factors[name] * weight for name, weight in self.weights.items()), 2)

    def weighted(self) -> dict[str, float]:
        return {name: self.factors[name] * weight for name, weight in self.weights.items()}


@dataclass
class CandidateSlot:
    """A generated, still-tentative time interval for a new meeting."""
    start: datetime
    end: datetime
    duration_minutes: int
    day_of_week: int  # 0=Sunday
    time_bucket: str
    availability: list[ParticipantAvailability] = field(default_factory=list)
    breakdown: Optional[ScoreBreakdown] = None
    sequence: int = 0  # enumeration order, used to break score ties

    def __post_init__(self):
        if self.end != self.start + timedelta(minutes=self.duration_minutes):
            raise InputError("Slot end must equal start + duration")

    @property
    def score(self) -> float:
        return self.breakdown.total if self.breakdown else 0.0

    @property
    def factors(self) -> dict[str, float]:
        return dict(self.breakdown.factors) if self.breakdown else {}

    @property
    def label(self) -> str:
        return score_label(self.score)

    @property
    def available_count(self) -> int:
        return sum(1 for a in self.availability if a.available)


@dataclass
class TimeBucketRate:
    total: int = 0
    successful: int = 0

    @property
    def rate(self) -> float:
        """Completion rate as a percentage; 0 when there is no history."""
        return (self.successful / self.total) * 100 if self.total else 0.0


@dataclass
class PatternStats:
    """Descriptive statistics over historical commitments."""
    time_of_day: dict[str, int] = field(default_factory=dict)
    day_of_week: dict[int, int] = field(default_factory=dict)
    duration: dict[int, int] = field(default_factory=dict)
    success_rate: dict[str, TimeBucketRate] = field(default_factory=dict)

    @property
    def total_meetings(self) -> int:
        return sum(self.day_of_week.values())


@dataclass
class SchedulingRequest:
    """One pending meeting to place."""
    duration_minutes: int
    participants: list[Participant]
    date_range_start: date
    date_range_end: date
    priority: str = "medium"
    meeting_type: str = "interview"
    title: str = ""
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        if not isinstance(self.duration_minutes, int) or self.duration_minutes <= 0:
            raise InputError(f"Meeting duration must be a positive number of minutes, got {self.duration_minutes!r}")
        self.date_range_start = as_date(self.date_range_start)
        self.date_range_end = as_date(self.date_range_end)
        if self.date_range_end < self.date_range_start:
            raise InputError(
                f"Date range ends ({self.date_range_end}) before it starts ({self.date_range_start})"
            )
        self.participants = [
            p if isinstance(p, Participant) else Participant.from_dict(p)
            for p in self.participants
        ]

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        defaults: Optional[dict[str, Any]] = None
    ) -> "SchedulingRequest":
        """
        Build a request from a loose record.

        Values are layered: ``defaults`` (batch-wide), then the record's own
        ``constraints`` mapping, then its top-level keys.
        """
        merged: dict[str, Any] = {}
        for layer in (defaults or {}, data.get("constraints") or {}, data):
            merged.update(_request_fields(layer))

        try:
            return cls(
                duration_minutes=int(merged["duration_minutes"]),
                participants=list(merged.get("participants", [])),
                date_range_start=merged["date_range_start"],
                date_range_end=merged["date_range_end"],
                priority=merged.get("priority", "medium"),
                meeting_type=merged.get("meeting_type", "interview"),
                title=merged.get("title", ""),
                id=merged.get("id") or _new_id(),
            )
        except InputError:
            raise
        except KeyError as e:
            raise InputError(f"Scheduling request is missing {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise InputError(f"Malformed scheduling request: {e}") from e


def _request_fields(layer: dict[str, Any]) -> dict[str, Any]:
    fields = {k: v for k, v in layer.items() if k != "constraints" and v is not None}
    if "duration" in fields:
        fields.setdefault("duration_minutes", fields.pop("duration"))
    return fields


@dataclass(frozen=True)
class ScheduledMeeting:
    request: SchedulingRequest
    slot: CandidateSlot
    auto_scheduled: bool = True

    def to_commitment(self) -> Commitment:
        return Commitment(
            start=self.slot.start,
            end=self.slot.end,
            duration_minutes=self.slot.duration_minutes,
            status=CommitmentStatus.SCHEDULED,
            participant_ids=tuple(p.id for p in self.request.participants),
            title=self.request.title or self.request.meeting_type,
        )


@dataclass(frozen=True)
class DeferredMeeting:
    request: SchedulingRequest
    suggestions: list[CandidateSlot]


@dataclass(frozen=True)
class UnresolvedMeeting:
    request: SchedulingRequest
    reason: str


@dataclass
class SchedulingResult:
    """Outcome of a batch run; every request lands in exactly one list."""
    scheduled: list[ScheduledMeeting] = field(default_factory=list)
    deferred: list[DeferredMeeting] = field(default_factory=list)
    unresolved: list[UnresolvedMeeting] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.scheduled) + len(self.deferred) + len(self.unresolved)

    def request_ids(self) -> list[str]:
        return [
            entry.request.id
            for entry in (*self.scheduled, *self.deferred, *self.unresolved)
        ]

    def new_commitments(self) -> list[Commitment]:
        """Commitments the caller is responsible for persisting."""
        return [entry.to_commitment() for entry in self.scheduled]

    def summary(self) -> dict[str, int]:
        return {
            "scheduled": len(self.scheduled),
            "deferred": len(self.deferred),
            "unresolved": len(self.unresolved),
        }


class RecommendationType(str, Enum):
    OPTIMAL = "optimal"
    ALTERNATIVES = "alternatives"
    INSIGHT = "insight"
    WARNING = "warning"


@dataclass
class Recommendation:
    type: RecommendationType
    title: str
    description: str
    priority: int
    reason: str = ""
    slot: Optional[CandidateSlot] = None
    slots: list[CandidateSlot] = field(default_factory=list)


@dataclass
class SchedulingConstraints:
    """Defaults for a suggestion run; unset fields come from the policy."""
    duration_minutes: Optional[int] = None
    date_range_start: Optional[date] = None
    date_range_end: Optional[date] = None
    priority: str = "medium"
    meeting_type: str = "interview"

    def request_defaults(self, policy: WorkingPolicy) -> dict[str, Any]:
        """Field values for requests that leave them out; the range defaults to a week from today."""
        start = as_date(self.date_range_start) if self.date_range_start else date.today()
        end = as_date(self.date_range_end) if self.date_range_end else start + timedelta(days=7)
        return {
            "duration_minutes": self.duration_minutes or policy.preferred_duration_minutes,
            "date_range_start": start,
            "date_range_end": end,
            "priority": self.priority,
            "meeting_type": self.meeting_type,
        }

    def to_request(self, policy: WorkingPolicy, participants: list[Participant]) -> SchedulingRequest:
        return SchedulingRequest(participants=list(participants), **self.request_defaults(policy))


@dataclass
class SchedulingAnalytics:
    total_slots_analyzed: int
    average_score: float
    best_time_of_day: Optional[str]
    best_day_of_week: Optional[str]


@dataclass
class SuggestionReport:
    suggestions: list[CandidateSlot]
    patterns: PatternStats
    recommendations: list[Recommendation]
    analytics: SchedulingAnalytics
