"""
Injectable time source.

Services never call ``datetime.now()`` themselves; they receive a Clock.
Quote creation times, status history timestamps and action log entries
all come from it, which keeps the history order reproducible in tests.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        start = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        if start.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware start time")
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: int | float | timedelta = 1) -> datetime:
        """Move forward and return the new time."""
        step = seconds if isinstance(seconds, timedelta) else timedelta(seconds=seconds)
        if step < timedelta(0):
            raise ValueError("DeterministicClock cannot move backwards")
        self._now += step
        return self._now
