"""Calendar-day buckets over a closed date window."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = os.getenv("CHILDTRACK_TIMEZONE", "UTC")


class InvalidWindowError(ValueError):
    """The requested window ends before it starts."""


def get_timezone(name: Optional[str] = None) -> tzinfo:
    """Reference time zone for day buckets (CHILDTRACK_TIMEZONE by default)."""
    name = name or DEFAULT_TIMEZONE
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def _elapsed_seconds(start: datetime, end: datetime) -> float:
    # Through UTC so DST transition days count their real length
    return (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds()


@dataclass(frozen=True)
class Window:
    """Closed interval of calendar days ``[start, end]`` in a reference zone."""
    start: date
    end: date
    tz: tzinfo = timezone.utc

    def __post_init__(self) -> None:
        if self.start is None or self.end is None:
            raise TypeError("Window start and end are required")
        if isinstance(self.start, datetime):
            object.__setattr__(self, "start", self.start.date())
        if isinstance(self.end, datetime):
            object.__setattr__(self, "end", self.end.date())
        if self.end < self.start:
            raise InvalidWindowError(
                f"Window end {self.end.isoformat()} is before start {self.start.isoformat()}"
            )

    @classmethod
    def ending_on(cls, day: date, days: int, tz: tzinfo = timezone.utc) -> "Window":
        """The `days`-long window whose last day is `day`."""
        if days < 1:
            raise InvalidWindowError(f"Window length must be at least one day, got {days}")
        return cls(day - timedelta(days=days - 1), day, tz)

    @property
    def length(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(self.length)]

    def keys(self) -> list[str]:
        """Bucket keys (YYYY-MM-DD), chronological, both ends included."""
        return [d.isoformat() for d in self.days()]

    def previous(self) -> "Window":
        """The window of equal length immediately before this one."""
        return Window(
            self.start - timedelta(days=self.length),
            self.start - timedelta(days=1),
            self.tz,
        )

    def day_start(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.tz)

    def bounds(self) -> tuple[datetime, datetime]:
        """Aware instants ``[start 00:00, day after end 00:00)``."""
        return self.day_start(self.start), self.day_start(self.end + timedelta(days=1))

    def localize(self, instant: datetime) -> datetime:
        """Express an instant in the reference zone; naive means already local."""
        if instant.tzinfo is None:
            return instant.replace(tzinfo=self.tz)
        return instant.astimezone(self.tz)

    def day_key(self, instant: Optional[datetime]) -> Optional[str]:
        """Bucket key of a single instant, or None when outside the window."""
        if instant is None:
            return None
        day = self.localize(instant).date()
        if self.start <= day <= self.end:
            return day.isoformat()
        return None

    def contains(self, instant: Optional[datetime]) -> bool:
        return self.day_key(instant) is not None

    def apportion(self, start: Optional[datetime], end: Optional[datetime]) -> dict[str, float]:
        """Seconds of ``[start, end)`` falling in each day of the window.

        The interval is clipped to the window first; days without overlap are
        left out of the result.
        """
        if start is None or end is None:
            return {}
        lo, hi = self.bounds()
        start = max(self.localize(start), lo)
        end = min(self.localize(end), hi)
        if _elapsed_seconds(start, end) <= 0:
            return {}

        shares: dict[str, float] = {}
        day = start.date()
        while True:
            next_day = self.day_start(day + timedelta(days=1))
            overlap = _elapsed_seconds(max(start, self.day_start(day)), min(end, next_day))
            if overlap > 0:
                shares[day.isoformat()] = overlap
            if _elapsed_seconds(next_day, end) <= 0:
                break
            day += timedelta(days=1)
        return shares


def empty_buckets(window: Window, factory: Callable[[], Any] = float) -> dict[str, Any]:
    """Zero/empty accumulator for every day of the window, in order."""
    return {key: factory() for key in window.keys()}
