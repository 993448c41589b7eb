"""Descriptive statistics over historical commitments."""

import logging
from typing import Iterable, Optional

from slot_engine.models.entities import Commitment, CommitmentStatus, PatternStats, TimeBucketRate
from slot_engine.utils.time_utils import day_of_week, time_bucket, to_local

logger = logging.getLogger(__name__)


class PatternAnalyzer:
    """Buckets historical meetings by time of day, weekday and duration."""

    def __init__(self, tz, default_duration_minutes: int = 60):
        self.tz = tz
        self.default_duration_minutes = default_duration_minutes

    def analyze(self, commitments: Iterable[Commitment]) -> PatternStats:
        stats = PatternStats()

        for commitment in commitments:
            start = to_local(commitment.start, self.tz)
            bucket = time_bucket(start.hour)
            weekday = day_of_week(start)
            duration = commitment.duration_minutes or self.default_duration_minutes

            stats.time_of_day[bucket] = stats.time_of_day.get(bucket, 0) + 1
            stats.day_of_week[weekday] = stats.day_of_week.get(weekday, 0) + 1
            stats.duration[duration] = stats.duration.get(duration, 0) + 1

            rate = stats.success_rate.setdefault(bucket, TimeBucketRate())
            rate.total += 1
            if commitment.status == CommitmentStatus.COMPLETED:
                rate.successful += 1

        logger.debug("Analyzed %d historical meeting(s)", stats.total_meetings)
        return stats

    @staticmethod
    def best_time_bucket(stats: PatternStats) -> Optional[str]:
        """Bucket with the highest completion rate, or None without history."""
        best = None
        best_rate = -1.0
        for bucket, data in stats.success_rate.items():
            if data.total and data.rate > best_rate:
                best, best_rate = bucket, data.rate
        return best
