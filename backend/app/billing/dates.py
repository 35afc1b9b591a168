"""Time helpers — the clock and date arithmetic used by subscription checks."""

import math
from datetime import datetime, timezone
from typing import Literal

TimeUnit = Literal["days", "hours", "minutes", "seconds"]

_SECONDS_PER_UNIT: dict[str, int] = {
    "days": 60 * 60 * 24,
    "hours": 60 * 60,
    "minutes": 60,
    "seconds": 1,
}


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_date_difference(
    first: datetime,
    second: datetime,
    unit: TimeUnit | None = None,
) -> int:
    """Whole units from ``first`` to ``second``, rounded half up to the nearest unit.

    Negative when ``second`` is before ``first``. Without a unit the
    difference is given in seconds.
    """
    delta = ensure_aware(second) - ensure_aware(first)
    seconds = delta.total_seconds()
    return math.floor(seconds / _SECONDS_PER_UNIT[unit or "seconds"] + 0.5)


def get_time_remaining(
    expires_on: datetime | None,
    unit: TimeUnit | None = None,
    *,
    now: datetime | None = None,
) -> int | None:
    """Time left until ``expires_on``, or None when there is no expiry."""
    if expires_on is None:
        return None
    return get_date_difference(now or utcnow(), expires_on, unit)
