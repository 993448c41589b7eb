"""Sequential batch scheduling with per-request failure isolation."""

import logging
from dataclasses import dataclass, replace
from functools import partial, reduce
from typing import Optional, Sequence, Union

from slot_engine.errors import InputError
from slot_engine.models.entities import (
    CandidateSlot,
    Commitment,
    DeferredMeeting,
    PatternStats,
    ScheduledMeeting,
    SchedulingRequest,
    SchedulingResult,
    UnresolvedMeeting,
    WorkingPolicy,
)
from slot_engine.services.availability import (
    AvailabilityProbe,
    OptimisticAvailabilityProbe,
    attach_availability,
    unavailable_throughout,
)
from slot_engine.services.pattern_analyzer import PatternAnalyzer
from slot_engine.services.slot_generator import SlotGenerator
from slot_engine.services.slot_ranker import SlotRanker
from slot_engine.utils.config import EngineSettings

logger = logging.getLogger(__name__)

NO_SLOTS_REASON = "No available time slots found"
MAX_DEFERRED_SUGGESTIONS = 3

Placement = Union[ScheduledMeeting, DeferredMeeting, UnresolvedMeeting]


@dataclass(frozen=True)
class BatchState:
    """Accumulator threaded through the batch: committed set plus outcomes so far."""
    commitments: tuple[Commitment, ...]
    scheduled: tuple[ScheduledMeeting, ...] = ()
    deferred: tuple[DeferredMeeting, ...] = ()
    unresolved: tuple[UnresolvedMeeting, ...] = ()

    def record(self, placement: Placement) -> "BatchState":
        if isinstance(placement, ScheduledMeeting):
            return replace(
                self,
                commitments=self.commitments + (placement.to_commitment(),),
                scheduled=self.scheduled + (placement,),
            )
        if isinstance(placement, DeferredMeeting):
            return replace(self, deferred=self.deferred + (placement,))
        return replace(self, unresolved=self.unresolved + (placement,))

    def to_result(self) -> SchedulingResult:
        return SchedulingResult(
            scheduled=list(self.scheduled),
            deferred=list(self.deferred),
            unresolved=list(self.unresolved),
        )


class AutoScheduler:
    """Places a batch of pending meetings, committing high-confidence slots."""

    def __init__(
        self,
        availability_probe: Optional[AvailabilityProbe] = None,
        settings: Optional[EngineSettings] = None,
        generator: Optional[SlotGenerator] = None
    ):
        self.settings = settings or EngineSettings()
        self.probe = availability_probe or OptimisticAvailabilityProbe()
        self.generator = generator or SlotGenerator(self.settings)

    def auto_schedule(
        self,
        requests: Sequence[SchedulingRequest],
        policy: WorkingPolicy,
        initial_commitments: Sequence[Commitment] = (),
        stats: Optional[PatternStats] = None
    ) -> SchedulingResult:
        """
        Process ``requests`` strictly in input order.

        Each accepted slot joins the committed set seen by every later
        request, so reordering the batch changes the outcome. Pattern
        statistics come from the initial commitments only.

        Raises:
            InputError: The batch is empty
        """
        requests = list(requests)
        if not requests:
            raise InputError("At least one scheduling request is required")

        if stats is None:
            analyzer = PatternAnalyzer(policy.tz, self.settings.default_commitment_minutes)
            stats = analyzer.analyze(initial_commitments)
        ranker = SlotRanker(policy, self.settings)

        logger.info("Auto-scheduling batch of %d request(s)", len(requests))
        step = partial(self._step, policy=policy, stats=stats, ranker=ranker)
        final = reduce(step, requests, BatchState(commitments=tuple(initial_commitments)))

        result = final.to_result()
        logger.info(
            "Batch finished: %(scheduled)d scheduled, %(deferred)d deferred, %(unresolved)d unresolved",
            result.summary()
        )
        return result

    def _step(
        self,
        state: BatchState,
        request: SchedulingRequest,
        policy: WorkingPolicy,
        stats: PatternStats,
        ranker: SlotRanker
    ) -> BatchState:
        try:
            placement = self.place(request, policy, state.commitments, stats, ranker)
        except Exception as e:
            logger.warning("Request %s could not be scheduled: %s", request.id, e, exc_info=True)
            placement = UnresolvedMeeting(request, str(e) or type(e).__name__)
        return state.record(placement)

    def place(
        self,
        request: SchedulingRequest,
        policy: WorkingPolicy,
        commitments: Sequence[Commitment],
        stats: PatternStats,
        ranker: Optional[SlotRanker] = None
    ) -> Placement:
        """Decide one request against a fixed commitment snapshot."""
        ranker = ranker or SlotRanker(policy, self.settings)

        slots = self.generator.generate_slots(
            request.date_range_start,
            request.date_range_end,
            request.duration_minutes,
            policy,
            commitments,
        )
        if not slots:
            return UnresolvedMeeting(request, NO_SLOTS_REASON)

        slots = attach_availability(slots, request.participants, self.probe)
        blocked = unavailable_throughout(slots, request.participants)
        if blocked:
            names = ", ".join(p.name or p.id for p in blocked)
            return UnresolvedMeeting(
                request, f"Participant {names} has no availability in the requested range"
            )

        ranked = ranker.rank(slots, stats, request.participants, commitments)
        best = self._commit_candidate(ranked, request)
        if best is not None and best.score >= self.settings.auto_commit_threshold:
            logger.info(
                "Auto-scheduled %s at %s (score %.2f)", request.id, best.start.isoformat(), best.score
            )
            return ScheduledMeeting(request, best, auto_scheduled=True)

        logger.debug(
            "Deferred %s: no slot reached %.2f", request.id, self.settings.auto_commit_threshold
        )
        return DeferredMeeting(request, ranked[:MAX_DEFERRED_SUGGESTIONS])

    def _commit_candidate(
        self,
        ranked: list[CandidateSlot],
        request: SchedulingRequest
    ) -> Optional[CandidateSlot]:
        # Only slots free for every participant qualify when full availability is required
        if not self.settings.require_full_availability:
            return ranked[0]
        everyone = len(request.participants)
        return next((s for s in ranked if s.available_count == everyone), None)
