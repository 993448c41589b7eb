"""Exceptions raised by the slot engine."""


class SchedulingError(Exception):
    """Base class for all slot engine errors."""


class InputError(SchedulingError, ValueError):
    """Malformed caller input: bad date range, non-positive duration, empty batch."""


class EnumerationTimeout(SchedulingError):
    """Slot enumeration ran past its deadline."""

    def __init__(self, seconds: float, days_scanned: int):
        self.seconds = seconds
        self.days_scanned = days_scanned
        super().__init__(
            f"Slot enumeration exceeded {seconds:.2f}s after scanning {days_scanned} day(s)"
        )
