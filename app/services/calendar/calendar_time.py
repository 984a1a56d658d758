"""
Date helpers for absolute week numbers.

Absolute week 0 is the Monday-start week containing 1970-01-01:

    Mo Tu We Th Fr Sa Su
    29 30 31  1  2  3  4   week 0 (Dec 1969 / Jan 1970)
     5  6  7  8  9 10 11   week 1
    12 13 14 15 16 17 18   week 2
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from .types import AbsWeek


EPOCH_MONDAY = date(1969, 12, 29)


def abs_week_of(day: date) -> AbsWeek:
    """Absolute week containing `day`. Raises ValueError before the epoch."""
    if day < EPOCH_MONDAY:
        raise ValueError(f"{day} is before the week epoch {EPOCH_MONDAY}")
    return (day - EPOCH_MONDAY).days // 7


def calculate_abs_week(year: int, month: int, day: int) -> Optional[AbsWeek]:
    """Absolute week of a (year, month 1-12, day); None if invalid or pre-epoch."""
    try:
        target = date(year, month, day)
    except ValueError:
        return None
    if target < EPOCH_MONDAY:
        return None
    return abs_week_of(target)


def week_start_of(abs_week: AbsWeek) -> date:
    """Monday of an absolute week."""
    return EPOCH_MONDAY + timedelta(weeks=abs_week)


def calculate_weeks_in_month(year: int, month: int) -> int:
    """Number of Monday-start calendar rows a month spans (4 to 6)."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    first_weekday, days_in_month = calendar.monthrange(year, month)
    return (first_weekday + days_in_month + 6) // 7
