"""Tests for growthhub.core.content_scheduler — slot assignment."""

import logging
from datetime import date, timedelta

import pytest

from growthhub.core.calendar_grid import format_date_key
from growthhub.core.content_scheduler import generate_schedule, schedule_is_complete

# Monday 19 October 2026
MONDAY = date(2026, 10, 19)


class TestGenerateSchedule:
    def test_places_items_on_allowed_weekdays(self):
        schedule = generate_schedule(["a", "b", "c"], [1, 3], set(), today=MONDAY)
        assert schedule == {
            "2026-10-21": "a",   # Wednesday
            "2026-10-26": "b",   # Monday
            "2026-10-28": "c",   # Wednesday
        }

    def test_skips_existing_dates(self):
        schedule = generate_schedule(["a", "b", "c"], [1, 3], {"2026-10-21"}, today=MONDAY)
        assert list(schedule) == ["2026-10-26", "2026-10-28", "2026-11-02"]
        assert list(schedule.values()) == ["a", "b", "c"]

    def test_never_schedules_today(self):
        schedule = generate_schedule(["a"], [0, 1, 2, 3, 4, 5, 6], set(), today=MONDAY)
        assert schedule == {"2026-10-20": "a"}

    def test_weekday_indices_are_sunday_based(self):
        schedule = generate_schedule(["first", "second"], [0, 6], set(), today=MONDAY)
        assert schedule == {"2026-10-24": "first", "2026-10-25": "second"}  # Sat, Sun

    def test_weekday_mon_wed_never_hits_weekend(self):
        items = list(range(20))
        schedule = generate_schedule(items, [1, 3], set(), today=MONDAY)
        assert len(schedule) == 20
        for key in schedule:
            assert date.fromisoformat(key).weekday() in (0, 2)

    def test_dates_strictly_increasing_from_tomorrow(self):
        schedule = generate_schedule(list("abcdef"), [1, 3, 5], {"2026-10-23"})
        keys = list(schedule)
        assert keys == sorted(keys)
        assert len(set(keys)) == len(keys)
        assert keys[0] > format_date_key(date.today())
        assert "2026-10-23" not in schedule

    def test_keeps_item_objects(self):
        posts = [{"title": "Launch"}, {"title": "Recap"}]
        schedule = generate_schedule(posts, [2], set(), today=MONDAY)
        assert schedule["2026-10-20"] is posts[0]
        assert schedule["2026-10-27"] is posts[1]

    @pytest.mark.parametrize("items, weekdays", [
        ([], [1, 3]),
        (["a", "b"], []),
        ([], []),
    ])
    def test_empty_input_returns_empty(self, items, weekdays):
        assert generate_schedule(items, weekdays, set(), today=MONDAY) == {}

    def test_cap_returns_partial_schedule_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="growthhub.core.content_scheduler"):
            schedule = generate_schedule(["a", "b", "c"], [1], set(), today=MONDAY, max_days=7)
        assert schedule == {"2026-10-26": "a"}
        assert any("Scheduled 1 of 3" in r.getMessage() for r in caplog.records)

    def test_default_cap_is_a_year(self):
        items = list(range(60))
        schedule = generate_schedule(items, [1], set(), today=MONDAY)
        assert len(schedule) == 52
        last = date.fromisoformat(list(schedule)[-1])
        assert last - MONDAY <= timedelta(days=365)

    def test_all_dates_taken_returns_empty(self):
        taken = {format_date_key(MONDAY + timedelta(days=i)) for i in range(1, 400)}
        assert generate_schedule(["a"], [0, 1, 2, 3, 4, 5, 6], taken, today=MONDAY) == {}

    def test_accepts_list_of_existing_dates(self):
        schedule = generate_schedule(["a"], [2], ["2026-10-20"], today=MONDAY)
        assert schedule == {"2026-10-27": "a"}


class TestScheduleIsComplete:
    def test_complete(self):
        items = ["a", "b"]
        assert schedule_is_complete(items, generate_schedule(items, [1], set(), today=MONDAY))

    def test_incomplete(self):
        items = ["a", "b", "c"]
        schedule = generate_schedule(items, [1], set(), today=MONDAY, max_days=7)
        assert schedule_is_complete(items, schedule) is False
