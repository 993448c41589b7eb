"""Commitment sources the engine reads booked meetings from."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Protocol

from slot_engine.models.entities import Commitment

logger = logging.getLogger(__name__)


class CommitmentSource(Protocol):
    """Read interface over already-booked meetings."""

    def list_commitments(self) -> list[Commitment]:
        ...


class InMemoryCommitmentStore:
    """
    Process-local commitment store owned by the caller.

    The engine only reads it. Callers that run batches concurrently against
    the same interviewers or rooms hold ``exclusive()`` for the whole
    read-schedule-persist cycle so batches touching the resource serialize.
    """

    def __init__(self, commitments: Iterable[Commitment] = ()):
        self._commitments: list[Commitment] = list(commitments)
        self._lock = threading.RLock()

    @contextmanager
    def exclusive(self) -> Iterator["InMemoryCommitmentStore"]:
        with self._lock:
            yield self

    def list_commitments(self) -> list[Commitment]:
        return self.snapshot()

    def snapshot(self) -> list[Commitment]:
        with self._lock:
            return list(self._commitments)

    def extend(self, commitments: Iterable[Commitment]) -> int:
        added = list(commitments)
        with self._lock:
            self._commitments.extend(added)
        logger.info("Stored %d new commitment(s)", len(added))
        return len(added)

    def __len__(self) -> int:
        with self._lock:
            return len(self._commitments)
