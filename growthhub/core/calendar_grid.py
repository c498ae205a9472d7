"""Month/week calendar grid — pure date logic.

Weeks start on Monday. A month view is always 42 cells (6 rows x 7 days),
padded with days from the neighbouring months.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta

GRID_SIZE = 42


@dataclass(frozen=True)
class MonthDay:
    """One cell of a month grid."""

    date: date
    is_current_month: bool


def _as_local_date(d: date | datetime) -> date:
    """Calendar date in local time. Aware datetimes are converted, never UTC-shifted."""
    if isinstance(d, datetime):
        if d.tzinfo is not None:
            d = d.astimezone()
        return d.date()
    return d


def format_date_key(d: date | datetime) -> str:
    """Canonical YYYY-MM-DD key in local time."""
    local = _as_local_date(d)
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def sunday_based_weekday(d: date | datetime) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (_as_local_date(d).weekday() + 1) % 7


def get_week_number(d: date | datetime) -> int:
    """ISO-8601 week number (week 1 holds the year's first Thursday)."""
    return _as_local_date(d).isocalendar()[1]


def get_days_in_month(year: int, month: int) -> list[MonthDay]:
    """Return the 42-cell Monday-start grid for a month (1-12).

    Month is not range-checked; date() raises ValueError for bad input.
    """
    first = date(year, month, 1)
    days: list[MonthDay] = []

    # Previous month padding: Monday-start index of the 1st
    lead = first.weekday()
    for i in range(lead, 0, -1):
        days.append(MonthDay(first - timedelta(days=i), False))

    last_day = calendar.monthrange(year, month)[1]
    for day in range(1, last_day + 1):
        days.append(MonthDay(date(year, month, day), True))

    # Finish the last row, then keep going to fill 6 rows
    cursor = date(year, month, last_day)
    while len(days) < GRID_SIZE:
        cursor += timedelta(days=1)
        days.append(MonthDay(cursor, False))

    return days[:GRID_SIZE]


def get_week_rows(year: int, month: int) -> list[list[MonthDay]]:
    """The month grid split into 6 weeks of 7 days."""
    days = get_days_in_month(year, month)
    return [days[i:i + 7] for i in range(0, GRID_SIZE, 7)]


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Shift a (year, month) pair by delta months, rolling the year over."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    return _as_local_date(a) == _as_local_date(b)


def is_today(d: date | datetime) -> bool:
    return _as_local_date(d) == date.today()


def get_week_start(d: date | datetime) -> date:
    """The Monday of the week containing d."""
    local = _as_local_date(d)
    return local - timedelta(days=local.weekday())


def get_week_days(d: date | datetime) -> list[date]:
    """The seven dates, Monday to Sunday, of the week containing d."""
    start = get_week_start(d)
    return [start + timedelta(days=i) for i in range(7)]


def is_date_in_week(d: date | datetime, week_start: date | datetime) -> bool:
    """True if d falls within the 7 days starting at week_start."""
    start = _as_local_date(week_start)
    return start <= _as_local_date(d) <= start + timedelta(days=6)
