"""Calendar helpers: weekend detection and inclusive business-day counting."""

from __future__ import annotations

from collections.abc import Collection, Iterator
from datetime import date, timedelta
from typing import Optional

from bickers.common.constants import WEEKEND_DAYS


def is_weekend(d: date) -> bool:
    """Saturday or Sunday."""
    return d.weekday() in WEEKEND_DAYS


def is_working_day(d: date, holidays: Collection[date] = ()) -> bool:
    return not is_weekend(d) and d not in holidays


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        if current == date.max:
            return
        current += timedelta(days=1)


def count_business_days_inclusive(
    start: date,
    end: date,
    holidays: Collection[date] = (),
) -> int:
    """Working days in ``[start, end]``; ``start > end`` counts as 0.

    ``holidays`` are extra non-working dates (bank holidays) on top of
    weekends. Counted per whole week, so open-ended ranges stay cheap.
    """
    if start > end:
        return 0
    weeks, extra_days = divmod((end - start).days + 1, 7)
    first_weekday = start.weekday()
    count = weeks * (7 - len(WEEKEND_DAYS)) + sum(
        1 for offset in range(extra_days) if (first_weekday + offset) % 7 not in WEEKEND_DAYS
    )
    count -= sum(1 for d in set(holidays) if start <= d <= end and not is_weekend(d))
    return count


def clamp_range(
    start: date,
    end: date,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
) -> Optional[tuple[date, date]]:
    """Intersect ``[start, end]`` with the window, or ``None`` if disjoint."""
    lo = max(start, window_start) if window_start else start
    hi = min(end, window_end) if window_end else end
    if lo > hi:
        return None
    return lo, hi


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)
