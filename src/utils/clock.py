"""
Injectable time source.

Components that need "now" take a clock instead of reading the system time,
so tests can drive deadlines and durations deterministically.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock:
    """Source of timezone-aware UTC instants."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock(Clock):
    """
    Manually controlled clock.

    Args:
        start: Initial instant (defaults to 2020-01-01T00:00:00Z)
        tick: Amount the clock advances after every ``now()`` call
    """

    def __init__(self, start: Optional[datetime] = None, tick: timedelta = timedelta(0)):
        self._now = start or datetime(2020, 1, 1, tzinfo=timezone.utc)
        self._tick = tick
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._now
            self._now = current + self._tick
            return current

    def advance(self, delta: timedelta):
        with self._lock:
            self._now += delta

    def set(self, instant: datetime):
        with self._lock:
            self._now = instant
