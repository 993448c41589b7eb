"""Overlap checks between candidate intervals and booked commitments."""

from datetime import datetime
from typing import Iterable

from slot_engine.models.entities import Commitment
from slot_engine.utils.time_utils import to_local


class ConflictDetector:
    """Detects half-open interval overlap against a commitment set."""

    def __init__(self, tz, default_commitment_minutes: int = 60):
        self.tz = tz
        self.default_commitment_minutes = default_commitment_minutes

    def interval(self, commitment: Commitment) -> tuple[datetime, datetime]:
        """Commitment interval in the policy timezone."""
        start = to_local(commitment.start, self.tz)
        end = to_local(commitment.resolved_end(self.default_commitment_minutes), self.tz)
        return start, end

    def _blocks(self, slot_start: datetime, slot_end: datetime, commitment: Commitment) -> bool:
        if not commitment.blocks_time:
            return False
        start, end = self.interval(commitment)
        return slot_start < end and slot_end > start

    def conflicts(
        self,
        slot_start: datetime,
        slot_end: datetime,
        commitments: Iterable[Commitment]
    ) -> list[Commitment]:
        """All non-cancelled commitments overlapping ``[slot_start, slot_end)``."""
        return [c for c in commitments if self._blocks(slot_start, slot_end, c)]

    def overlaps(
        self,
        slot_start: datetime,
        slot_end: datetime,
        commitments: Iterable[Commitment]
    ) -> bool:
        return any(self._blocks(slot_start, slot_end, c) for c in commitments)
