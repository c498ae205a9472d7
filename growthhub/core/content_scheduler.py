"""
GrowthHub Core — Content Scheduler.

Spreads a batch of draft posts over future calendar days: one post per
free day, only on the weekdays the user picked, skipping days that
already have something scheduled.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import TypeVar

from growthhub.core.calendar_grid import format_date_key, sunday_based_weekday

logger = logging.getLogger(__name__)

T = TypeVar("T")


def generate_schedule(
    items: Sequence[T],
    weekdays: Iterable[int],
    existing_dates: Iterable[str],
    *,
    today: date | None = None,
    max_days: int | None = None,
) -> dict[str, T]:
    """Assign items, in order, to the next free allowed days.

    Args:
        items: Posts (or anything) to place, in the order they should run.
        weekdays: Allowed weekdays, 0=Sunday .. 6=Saturday.
        existing_dates: YYYY-MM-DD keys that are already taken.
        today: Reference day; scheduling starts the day after. Defaults to
            the local current date.
        max_days: How many days to walk before giving up. Defaults to
            SCHEDULE_MAX_DAYS (365).

    Returns:
        Dict of YYYY-MM-DD → item in ascending date order. May hold fewer
        entries than items if the walk ran out of days; see
        schedule_is_complete().
    """
    schedule: dict[str, T] = {}
    allowed = set(weekdays)
    if not allowed or not items:
        return schedule

    if max_days is None:
        from growthhub.config import settings
        max_days = settings.SCHEDULE_MAX_DAYS

    taken = set(existing_dates)
    current = (today or date.today()) + timedelta(days=1)
    item_index = 0
    days_checked = 0

    while item_index < len(items) and days_checked < max_days:
        key = format_date_key(current)
        if sunday_based_weekday(current) in allowed and key not in taken:
            schedule[key] = items[item_index]
            item_index += 1
        current += timedelta(days=1)
        days_checked += 1

    if item_index < len(items):
        logger.warning(
            "Scheduled %d of %d items; no free slot within %d days",
            item_index, len(items), max_days,
        )
    else:
        logger.info("Scheduled %d items through %s", len(schedule), key)

    return schedule


def schedule_is_complete(items: Sequence[object], schedule: dict[str, object]) -> bool:
    """True if every item got a date."""
    return len(schedule) >= len(items)
