"""Participant availability lookups for candidate slots."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from slot_engine.models.entities import Participant, ParticipantAvailability
from slot_engine.utils.time_utils import to_local

logger = logging.getLogger(__name__)

BusyInterval = tuple[datetime, datetime, str]


class AvailabilityProbe(Protocol):
    """Answers, per participant, whether they are free for ``[start, end)``."""

    def check(
        self,
        start: datetime,
        end: datetime,
        participants: Sequence[Participant]
    ) -> list[ParticipantAvailability]:
        ...


class OptimisticAvailabilityProbe:
    """
    Reports every participant as available.

    Placeholder used when no calendar lookup is wired in. Production
    deployments must inject a real probe.
    """

    def __init__(self):
        self._warned = False

    def check(
        self,
        start: datetime,
        end: datetime,
        participants: Sequence[Participant]
    ) -> list[ParticipantAvailability]:
        if participants and not self._warned:
            logger.warning("No availability probe configured; assuming all participants are free")
            self._warned = True
        return [ParticipantAvailability(p.id, p.name, True) for p in participants]


class CalendarAvailabilityProbe:
    """
    Deterministic availability over per-participant busy intervals.

    Busy intervals are ``(start, end, title)`` tuples keyed by participant id;
    naive datetimes are read in ``tz``.
    A participant is unavailable when any busy interval overlaps the slot;
    the titles of the overlapping intervals are reported as conflicts.
    """

    def __init__(self, busy: Optional[Mapping[str, Iterable]] = None, tz=None):
        self.tz = tz
        self._busy: dict[str, list[BusyInterval]] = {}
        for participant_id, intervals in (busy or {}).items():
            for interval in intervals:
                self.add_busy(participant_id, *interval)

    def add_busy(self, participant_id: str, start: datetime, end: datetime, title: str = "Busy"):
        if start.tzinfo is None or end.tzinfo is None:
            if self.tz is None:
                raise ValueError("Naive busy intervals need the probe to be given a timezone")
            start, end = to_local(start, self.tz), to_local(end, self.tz)
        if end <= start:
            raise ValueError(f"Busy interval for {participant_id} ends before it starts")
        self._busy.setdefault(participant_id, []).append((start, end, title))
        self._busy[participant_id].sort(key=lambda b: b[0])

    def get_busy_slots(self, participant_id: str, start: datetime, end: datetime) -> list[BusyInterval]:
        """Busy intervals of one participant overlapping ``[start, end)``."""
        return [
            busy for busy in self._busy.get(participant_id, [])
            if not (busy[1] <= start or busy[0] >= end)
        ]

    def check(
        self,
        start: datetime,
        end: datetime,
        participants: Sequence[Participant]
    ) -> list[ParticipantAvailability]:
        result = []
        for participant in participants:
            overlapping = self.get_busy_slots(participant.id, start, end)
            result.append(ParticipantAvailability(
                participant_id=participant.id,
                name=participant.name,
                available=not overlapping,
                conflicts=tuple(title for _, _, title in overlapping),
            ))
        return result


def attach_availability(
    slots: Sequence,
    participants: Sequence[Participant],
    probe: AvailabilityProbe
) -> list:
    """Copies of ``slots`` annotated with the probe's per-participant answers."""
    return [
        replace(slot, availability=list(probe.check(slot.start, slot.end, participants)))
        for slot in slots
    ]


def unavailable_throughout(slots: Sequence, participants: Sequence[Participant]) -> list[Participant]:
    """Participants who are not free in any of the probed slots."""
    free = {a.participant_id for slot in slots for a in slot.availability if a.available}
    return [p for p in participants if p.id not in free]
