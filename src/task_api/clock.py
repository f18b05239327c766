from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Union


# PUBLIC_INTERFACE
class Clock(ABC):
    """
    Source of the current time for date-window validation, overdue calculation
    and server-set timestamps.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware UTC timestamp."""

    def today(self) -> date:
        """Return the current UTC date."""
        return self.now().date()

    def today_iso(self) -> str:
        """Return the current UTC date as YYYY-MM-DD."""
        return self.today().isoformat()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    A clock pinned to a given instant. Accepts a date (pinned to midnight UTC)
    or a datetime (naive values are treated as UTC).
    """

    def __init__(self, current: Union[date, datetime]) -> None:
        if not isinstance(current, datetime):
            current = datetime(current.year, current.month, current.day, tzinfo=timezone.utc)
        elif current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self._current = current

    def now(self) -> datetime:
        return self._current
