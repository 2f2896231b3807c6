from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Client-side 'now' in UTC (aware)."""
    return datetime.now(timezone.utc)


def today() -> date:
    return utcnow().date()


def epoch_millis(dt: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch; used to make export file names unique."""
    dt = dt or utcnow()
    return int(dt.timestamp() * 1000)


def shift_months(d: date, months: int) -> date:
    """
    Move a date by whole months, clamping the day to the target month.

    2024-03-31 shifted by -1 gives 2024-02-29.
    """
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return d.replace(year=year, month=month, day=min(d.day, last_day))

