"""Weighted multi-factor scoring of candidate slots."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Sequence

from slot_engine.models.entities import (
    CandidateSlot,
    Commitment,
    Participant,
    ParticipantAvailability,
    PatternStats,
    ScoreBreakdown,
    WorkingPolicy,
)
from slot_engine.services.conflict_detector import ConflictDetector
from slot_engine.utils.config import EngineSettings

logger = logging.getLogger(__name__)

FACTOR_WEIGHTS = {
    "historical_success": 0.30,
    "time_preference": 0.25,
    "availability": 0.20,
    "day_preference": 0.15,
    "buffer_optimization": 0.10,
}

LABEL_DESCRIPTIONS = {
    "excellent": "Excellent - Highly recommended",
    "very-good": "Very Good - Strong candidate",
    "good": "Good - Suitable option",
    "fair": "Fair - Consider alternatives",
    "poor": "Poor - Not recommended",
}

DEFAULT_SUCCESS_RATE = 50.0
DEFAULT_DAY_PREFERENCE = 70.0
UNKNOWN_BUCKET_PREFERENCE = 50.0


def describe_label(label: str) -> str:
    return LABEL_DESCRIPTIONS.get(label, label)


class SlotRanker:
    """Scores slots on five weighted factors and sorts them best first."""

    def __init__(
        self,
        policy: WorkingPolicy,
        settings: Optional[EngineSettings] = None,
        weights: Optional[dict[str, float]] = None
    ):
        self.policy = policy
        self.settings = settings or EngineSettings()
        self.weights = dict(weights or FACTOR_WEIGHTS)
        if set(self.weights) != set(FACTOR_WEIGHTS):
            raise ValueError(f"Weights must cover exactly {sorted(FACTOR_WEIGHTS)}")
        if abs(sum(self.weights.values()) - 1.0) > 1e-9:
            raise ValueError("Factor weights must sum to 1.0")

    def rank(
        self,
        slots: Sequence[CandidateSlot],
        stats: PatternStats,
        participants: Optional[Sequence[Participant]] = None,
        commitments: Sequence[Commitment] = ()
    ) -> list[CandidateSlot]:
        """
        Score every slot and return them sorted by score, best first.

        Ties keep enumeration order. When ``participants`` is given, a
        participant with no availability record on a slot counts as
        unavailable; otherwise the slot's own records define the total.
        """
        neighbours = self._buffer_neighbours(slots, commitments)

        ranked = []
        for slot in slots:
            factors = {
                "historical_success": self.historical_success_score(slot.time_bucket, stats),
                "time_preference": self.time_preference_score(slot.time_bucket),
                "availability": self.availability_score(slot.availability, participants),
                "day_preference": self.day_preference_score(slot.day_of_week, stats),
                "buffer_optimization": self.buffer_score(slot, neighbours),
            }
            ranked.append(replace(slot, breakdown=ScoreBreakdown(factors, self.weights)))

        ranked.sort(key=lambda s: (-s.score, s.sequence))
        if ranked:
            logger.debug("Ranked %d slot(s); best %.2f (%s)", len(ranked), ranked[0].score, ranked[0].label)
        return ranked

    @staticmethod
    def historical_success_score(bucket: str, stats: PatternStats) -> float:
        data = stats.success_rate.get(bucket)
        if data is None or data.total == 0:
            return DEFAULT_SUCCESS_RATE
        return data.rate

    def time_preference_score(self, bucket: str) -> float:
        return float(self.settings.time_preferences.get(bucket, UNKNOWN_BUCKET_PREFERENCE))

    @staticmethod
    def availability_score(
        availability: Sequence[ParticipantAvailability],
        participants: Optional[Sequence[Participant]] = None
    ) -> float:
        if participants is None:
            if not availability:
                return 100.0
            return sum(1 for a in availability if a.available) / len(availability) * 100
        if not participants:
            return 100.0
        free = {a.participant_id for a in availability if a.available}
        return sum(1 for p in participants if p.id in free) / len(participants) * 100

    @staticmethod
    def day_preference_score(weekday: int, stats: PatternStats) -> float:
        total = stats.total_meetings
        if total == 0:
            return DEFAULT_DAY_PREFERENCE
        return stats.day_of_week.get(weekday, 0) / total * 100

    def buffer_score(self, slot: CandidateSlot, neighbours: list[tuple[int, datetime, datetime]]) -> float:
        """100 when both sides are clear of neighbours within the buffer, 75 for one, 50 for none."""
        buffer = timedelta(minutes=self.policy.buffer_minutes)
        crowded_before = any(
            abs(end - slot.start) < buffer
            for sequence, _, end in neighbours if sequence != slot.sequence
        )
        crowded_after = any(
            abs(slot.end - start) < buffer
            for sequence, start, _ in neighbours if sequence != slot.sequence
        )

        if not crowded_before and not crowded_after:
            return 100.0
        if not crowded_before or not crowded_after:
            return 75.0
        return 50.0

    def _buffer_neighbours(
        self,
        slots: Sequence[CandidateSlot],
        commitments: Sequence[Commitment]
    ) -> list[tuple[int, datetime, datetime]]:
        # Commitments carry sequence -1 so they never match a slot
        if self.settings.buffer_scope == "candidates":
            return [(s.sequence, s.start, s.end) for s in slots]

        detector = ConflictDetector(self.policy.tz, self.settings.default_commitment_minutes)
        return [
            (-1, *detector.interval(c))
            for c in commitments if c.blocks_time
        ]
