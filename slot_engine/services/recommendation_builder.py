"""Turns a ranked slot list into human-facing recommendation records."""

import logging
from collections import defaultdict
from typing import Optional, Sequence

from slot_engine.models.entities import (
    CandidateSlot,
    PatternStats,
    Recommendation,
    RecommendationType,
)
from slot_engine.services.pattern_analyzer import PatternAnalyzer
from slot_engine.services.response_formatter import ResponseFormatter
from slot_engine.utils.time_utils import DAY_NAMES, TIME_BUCKET_NAMES

logger = logging.getLogger(__name__)


def _best_average(ranked_slots: Sequence[CandidateSlot], key) -> Optional[object]:
    totals: dict = defaultdict(lambda: [0.0, 0])
    for slot in ranked_slots:
        entry = totals[key(slot)]
        entry[0] += slot.score
        entry[1] += 1

    best, best_average = None, 0.0
    for group, (total, count) in totals.items():
        average = total / count
        if average > best_average:
            best, best_average = group, average
    return best


def best_time_of_day(ranked_slots: Sequence[CandidateSlot]) -> Optional[str]:
    """Display name of the bucket with the highest average score."""
    bucket = _best_average(ranked_slots, lambda s: s.time_bucket)
    if bucket is None:
        return None
    return TIME_BUCKET_NAMES.get(bucket, bucket)


def best_day_of_week(ranked_slots: Sequence[CandidateSlot]) -> Optional[str]:
    day = _best_average(ranked_slots, lambda s: s.day_of_week)
    return DAY_NAMES[day] if day is not None else None


class RecommendationBuilder:
    """Builds optimal/alternatives/insight/warning records, in that priority."""

    def __init__(self, low_availability_threshold: float = 70.0, max_alternatives: int = 3):
        self.low_availability_threshold = low_availability_threshold
        self.max_alternatives = max_alternatives

    def build(
        self,
        ranked_slots: Sequence[CandidateSlot],
        stats: Optional[PatternStats] = None
    ) -> list[Recommendation]:
        recommendations: list[Recommendation] = []
        if not ranked_slots:
            return recommendations

        best = ranked_slots[0]
        recommendations.append(Recommendation(
            type=RecommendationType.OPTIMAL,
            title="Optimal Time Slot",
            description=(
                f"{ResponseFormatter.format_slot_date(best)} at {ResponseFormatter.format_slot_time(best)}"
            ),
            reason=f"Score: {best.score}/100 - High success rate and good availability",
            slot=best,
            priority=1,
        ))

        alternatives = list(ranked_slots[1:1 + self.max_alternatives])
        if alternatives:
            recommendations.append(Recommendation(
                type=RecommendationType.ALTERNATIVES,
                title="Alternative Time Slots",
                description=f"{len(alternatives)} other good options available",
                slots=alternatives,
                priority=2,
            ))

        best_bucket = best_time_of_day(ranked_slots)
        if best_bucket:
            reason = ""
            if stats is not None and stats.total_meetings:
                reason = f"Based on {stats.total_meetings} historical meeting(s)"
                historical = PatternAnalyzer.best_time_bucket(stats)
                if historical:
                    reason += f"; highest completion rate: {TIME_BUCKET_NAMES[historical]}"
            recommendations.append(Recommendation(
                type=RecommendationType.INSIGHT,
                title="Best Time of Day",
                description=f"{best_bucket} typically has the highest success rate",
                reason=reason,
                priority=3,
            ))

        low_availability = [
            slot for slot in ranked_slots
            if slot.factors.get("availability", 100.0) < self.low_availability_threshold
        ]
        if len(low_availability) > len(ranked_slots) * 0.5:
            recommendations.append(self._limited_availability_warning())

        logger.debug("Built %d recommendation(s)", len(recommendations))
        return recommendations

    def build_empty_notice(self, reason: str = "") -> list[Recommendation]:
        """Explanation for a request that produced no feasible slot."""
        return [Recommendation(
            type=RecommendationType.WARNING,
            title="No Available Time Slots",
            description=(
                "No slot fits the working hours, break and existing meetings. "
                "Consider extending the date range or shortening the meeting."
            ),
            reason=reason,
            priority=4,
        )]

    @staticmethod
    def _limited_availability_warning() -> Recommendation:
        return Recommendation(
            type=RecommendationType.WARNING,
            title="Limited Availability",
            description="Many participants have scheduling conflicts. Consider extending the date range.",
            priority=4,
        )
