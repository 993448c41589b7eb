"""Candidate slot enumeration under working-hours, break and conflict constraints."""

import logging
import time as _time
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from slot_engine.errors import EnumerationTimeout, InputError
from slot_engine.models.entities import CandidateSlot, Commitment, WorkingPolicy
from slot_engine.services.conflict_detector import ConflictDetector
from slot_engine.utils.config import EngineSettings
from slot_engine.utils.time_utils import as_date, day_of_week, iter_days, time_bucket

logger = logging.getLogger(__name__)


class SlotGenerator:
    """Enumerates feasible meeting slots over a date range."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], float] = _time.monotonic
    ):
        self.settings = settings or EngineSettings()
        self.clock = clock

    def generate_slots(
        self,
        date_range_start: date,
        date_range_end: date,
        duration_minutes: int,
        policy: WorkingPolicy,
        commitments: Sequence[Commitment] = ()
    ) -> list[CandidateSlot]:
        """
        Generate conflict-free candidate slots.

        Walks every weekday in the inclusive range and steps through the
        working day at the policy granularity. A start time is dropped when
        the meeting would run past the end of the working day, touch the
        break window, or overlap a non-cancelled commitment. Days already
        holding ``max_meetings_per_day`` commitments yield nothing.

        Args:
            date_range_start: First calendar day to consider
            date_range_end: Last calendar day to consider (inclusive)
            duration_minutes: Meeting length
            policy: Working policy for this run
            commitments: Snapshot of the committed set; never mutated

        Returns:
            Slots in enumeration order (earliest first)

        Raises:
            InputError: Non-positive duration or a malformed/oversized range
            EnumerationTimeout: The enumeration deadline passed
        """
        start_day = as_date(date_range_start)
        end_day = as_date(date_range_end)
        self._validate(start_day, end_day, duration_minutes)

        tz = policy.tz
        detector = ConflictDetector(tz, self.settings.default_commitment_minutes)
        commitments = list(commitments)
        booked_per_day = self._count_per_day(commitments, detector)

        duration = timedelta(minutes=duration_minutes)
        step = timedelta(minutes=policy.slot_granularity_minutes)
        deadline = self.clock() + self.settings.enumeration_timeout_seconds

        slots: list[CandidateSlot] = []
        days_scanned = 0
        for day in iter_days(start_day, end_day):
            if self.clock() > deadline:
                raise EnumerationTimeout(self.settings.enumeration_timeout_seconds, days_scanned)
            days_scanned += 1

            # Skip weekends
            if day.weekday() >= 5:
                continue

            if booked_per_day[day] >= policy.max_meetings_per_day:
                logger.debug("Skipping %s: %d meetings already booked", day, booked_per_day[day])
                continue

            day_end = tz.localize(datetime.combine(day, policy.work_end))
            break_start = tz.localize(datetime.combine(day, policy.break_start))
            break_end = tz.localize(datetime.combine(day, policy.break_end))
            has_break = break_start < break_end

            naive_start = datetime.combine(day, policy.work_start)
            while True:
                slot_start = tz.localize(naive_start)
                if slot_start >= day_end:
                    break
                slot_end = slot_start + duration
                naive_start += step

                if slot_end > day_end:
                    break
                if has_break and slot_start < break_end and slot_end > break_start:
                    continue
                if detector.overlaps(slot_start, slot_end, commitments):
                    continue

                slots.append(CandidateSlot(
                    start=slot_start,
                    end=slot_end,
                    duration_minutes=duration_minutes,
                    day_of_week=day_of_week(slot_start),
                    time_bucket=time_bucket(slot_start.hour),
                    sequence=len(slots),
                ))

        logger.debug(
            "Generated %d slot(s) of %d min between %s and %s",
            len(slots), duration_minutes, start_day, end_day
        )
        return slots

    def _validate(self, start_day: date, end_day: date, duration_minutes: int):
        if not isinstance(duration_minutes, int) or duration_minutes <= 0:
            raise InputError(f"Meeting duration must be positive, got {duration_minutes!r}")
        if end_day < start_day:
            raise InputError(f"Date range ends ({end_day}) before it starts ({start_day})")
        span = (end_day - start_day).days + 1
        if span > self.settings.max_range_days:
            raise InputError(
                f"Date range spans {span} days; the limit is {self.settings.max_range_days}"
            )

    @staticmethod
    def _count_per_day(commitments: list[Commitment], detector: ConflictDetector) -> Counter:
        counts: Counter = Counter()
        for commitment in commitments:
            if commitment.blocks_time:
                start, _ = detector.interval(commitment)
                counts[start.date()] += 1
        return counts
