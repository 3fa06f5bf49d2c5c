"""Injectable source of the current date and time.

Every staleness computation is relative to "today". Engines take a Clock
so tests can pin the date instead of racing the wall clock.

Usage:
    from folio.core.clock import FixedClock, SystemClock

    clock = SystemClock()
    clock.today()

    clock = FixedClock(datetime(2026, 3, 1, 9, 0))
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from typing import Optional


class Clock(ABC):
    """Base clock. Subclasses supply now()."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant."""

    def today(self) -> date:
        """Current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in the local timezone."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)


class FixedClock(Clock):
    """Clock frozen at a given instant.

    Attributes:
        instant: The instant returned by now()
    """

    def __init__(self, instant: Optional[datetime] = None):
        self.instant = instant or datetime(2026, 1, 1, 9, 0, 0)

    def now(self) -> datetime:
        return self.instant

    def advance(self, days: int) -> None:
        """Move the frozen instant forward by whole days."""
        self.instant = self.instant + timedelta(days=days)
