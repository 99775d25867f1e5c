"""
Epoch-second helpers.

Price points and news items carry integer epoch-second timestamps (the shape
upstream market-data feeds deliver).  These helpers keep conversions in one
place so no module does ad hoc ``time.time()`` arithmetic.
"""

from __future__ import annotations

from datetime import datetime, timezone

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def now_epoch() -> int:
    """Return the current UTC time as integer epoch seconds."""
    return int(utcnow().timestamp())


def daily_timestamps(end_ts: int, days: int) -> list[int]:
    """Return ``days`` timestamps one day apart, oldest first, ending at ``end_ts``.

    Example::

        daily_timestamps(1_000_000, 3) == [827_200, 913_600, 1_000_000]
    """
    if days <= 0:
        return []
    return [end_ts - i * SECONDS_PER_DAY for i in range(days - 1, -1, -1)]
