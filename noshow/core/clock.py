"""Clinic wall clock."""

from collections.abc import Callable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from noshow.config import settings

Clock = Callable[[], datetime]


def clinic_now() -> datetime:
    """
    Current time in the clinic's timezone, without tzinfo.

    Booking dates and times and row timestamps are stored as naive wall-clock
    values, so comparisons against them use a naive datetime as well.
    """
    return datetime.now(ZoneInfo(settings.clinic_timezone)).replace(tzinfo=None)


def seconds_until(now: datetime, target: datetime, timezone: str) -> float:
    """
    Real seconds from ``now`` to ``target``, both naive wall-clock times in ``timezone``.

    Differs from plain subtraction when a DST change falls in between.
    """
    zone = ZoneInfo(timezone)
    start = now.replace(tzinfo=zone).astimezone(UTC)
    end = target.replace(tzinfo=zone).astimezone(UTC)
    return max((end - start).total_seconds(), 0.0)
