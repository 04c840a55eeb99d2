"""
Wall-clock utilities for cycle scheduling.

The scheduler never reads the system time directly; it goes through a Clock
so that tests can drive a 24-hour wait with a simulated clock.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    """Source of the current time and of suspension."""

    def now(self) -> datetime:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Real UTC wall clock backed by asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def seconds_until(target: datetime, now: Optional[datetime] = None) -> float:
    """
    Seconds remaining until ``target``, never negative.

    Args:
        target: Target UTC datetime
        now: Reference time, defaults to current wall-clock time

    Returns:
        Remaining seconds (0.0 once the target has passed)
    """
    if now is None:
        now = datetime.now(timezone.utc)

    return max(0.0, (target - now).total_seconds())


def format_countdown(remaining: timedelta) -> str:
    """
    Render a remaining duration as HH:MM:SS.

    Durations of a day or more keep counting hours past 24; negative
    durations render as 00:00:00.
    """
    total = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_utc(ts: datetime) -> str:
    """Format a timestamp for cycle banners, e.g. 'Sun, 18 Oct 2026 09:00:00 UTC'."""
    return ts.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S UTC")
