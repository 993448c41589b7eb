"""Core scheduling entry points exposed to the application layer."""

import logging
from typing import Any, Optional, Sequence, Union

from slot_engine.errors import EnumerationTimeout, InputError
from slot_engine.models.entities import (
    Commitment,
    Participant,
    SchedulingAnalytics,
    SchedulingConstraints,
    SchedulingRequest,
    SchedulingResult,
    SuggestionReport,
    WorkingPolicy,
)
from slot_engine.services.auto_scheduler import AutoScheduler
from slot_engine.services.availability import (
    AvailabilityProbe,
    OptimisticAvailabilityProbe,
    attach_availability,
)
from slot_engine.services.commitment_store import CommitmentSource
from slot_engine.services.pattern_analyzer import PatternAnalyzer
from slot_engine.services.recommendation_builder import (
    RecommendationBuilder,
    best_day_of_week,
    best_time_of_day,
)
from slot_engine.services.slot_generator import SlotGenerator
from slot_engine.services.slot_ranker import SlotRanker
from slot_engine.utils.config import EngineSettings

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """Engine for finding, ranking and auto-committing interview slots."""

    def __init__(
        self,
        availability_probe: Optional[AvailabilityProbe] = None,
        policy: Optional[WorkingPolicy] = None,
        settings: Optional[EngineSettings] = None,
        commitment_source: Optional[CommitmentSource] = None
    ):
        """Initialize scheduling engine."""
        self.policy = policy or WorkingPolicy()
        self.settings = settings or EngineSettings()
        self.availability_probe = availability_probe or OptimisticAvailabilityProbe()
        self.commitment_source = commitment_source

        self.generator = SlotGenerator(self.settings)
        self.analyzer = PatternAnalyzer(self.policy.tz, self.settings.default_commitment_minutes)
        self.ranker = SlotRanker(self.policy, self.settings)
        self.recommendations = RecommendationBuilder()
        self.auto_scheduler = AutoScheduler(self.availability_probe, self.settings, self.generator)

    def generate_scheduling_suggestions(
        self,
        existing_meetings: Optional[Sequence[Commitment]],
        participants: Sequence[Participant],
        constraints: Optional[SchedulingConstraints] = None
    ) -> SuggestionReport:
        """
        Rank candidate slots for one meeting without committing anything.

        Args:
            existing_meetings: Booked meetings (history and upcoming); None reads the commitment source
            participants: People who must attend
            constraints: Duration, date range, priority and meeting type

        Returns:
            Top suggestions, pattern statistics, recommendations and analytics

        Raises:
            InputError: Malformed constraints or an oversized date range.
                A search that runs past its deadline is reported as an empty
                result with a warning instead.
        """
        commitments = self._resolve_commitments(existing_meetings)
        participants = [_as_participant(p) for p in participants]
        request = (constraints or SchedulingConstraints()).to_request(self.policy, participants)

        patterns = self.analyzer.analyze(commitments)
        search_note = ""
        try:
            slots = self.generator.generate_slots(
                request.date_range_start,
                request.date_range_end,
                request.duration_minutes,
                self.policy,
                commitments,
            )
        except EnumerationTimeout as e:
            logger.warning("Suggestion search for %s stopped early: %s", request.meeting_type, e)
            slots = []
            search_note = f"{e}. Try a shorter date range."
        slots = attach_availability(slots, participants, self.availability_probe)
        ranked = self.ranker.rank(slots, patterns, participants, commitments)

        if ranked:
            recommendations = self.recommendations.build(ranked, patterns)
        else:
            recommendations = self.recommendations.build_empty_notice(search_note)

        analytics = SchedulingAnalytics(
            total_slots_analyzed=len(slots),
            average_score=round(sum(s.score for s in ranked) / len(ranked), 2) if ranked else 0.0,
            best_time_of_day=best_time_of_day(ranked),
            best_day_of_week=best_day_of_week(ranked),
        )
        logger.info(
            "Generated %d suggestion(s) from %d slot(s) for %s",
            min(len(ranked), self.settings.max_suggestions), len(slots), request.meeting_type
        )

        return SuggestionReport(
            suggestions=ranked[:self.settings.max_suggestions],
            patterns=patterns,
            recommendations=recommendations,
            analytics=analytics,
        )

    def auto_schedule_meetings(
        self,
        meetings: Sequence[Union[SchedulingRequest, dict[str, Any]]],
        existing_meetings: Optional[Sequence[Commitment]] = None,
        constraints: Optional[SchedulingConstraints] = None
    ) -> SchedulingResult:
        """
        Auto-schedule a batch of meetings in input order.

        Mapping records are completed from ``constraints`` (batch-wide
        duration, date range, priority and meeting type); a record's own
        values win. Without constraints a missing duration falls back to the
        policy's preferred duration.

        Accepted slots are returned as ``result.scheduled``; persisting them
        (``result.new_commitments()``) is the caller's job.

        Raises:
            InputError: Empty batch or a malformed request
        """
        if not meetings:
            raise InputError("At least one meeting is required")
        if constraints is not None:
            defaults = constraints.request_defaults(self.policy)
        else:
            defaults = {"duration_minutes": self.policy.preferred_duration_minutes}
        requests = [
            m if isinstance(m, SchedulingRequest) else SchedulingRequest.from_dict(m, defaults)
            for m in meetings
        ]
        commitments = self._resolve_commitments(existing_meetings)
        return self.auto_scheduler.auto_schedule(requests, self.policy, commitments)

    def _resolve_commitments(self, existing_meetings: Optional[Sequence[Commitment]]) -> list[Commitment]:
        if existing_meetings is None:
            if self.commitment_source is None:
                return []
            existing_meetings = self.commitment_source.list_commitments()
        return [
            m if isinstance(m, Commitment) else Commitment.from_dict(m)
            for m in existing_meetings
        ]


def _as_participant(value) -> Participant:
    return value if isinstance(value, Participant) else Participant.from_dict(value)
