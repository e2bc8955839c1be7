"""
Unit tests for calendar bucketing and grid views.
"""

from datetime import date
from zoneinfo import ZoneInfo

import pytest
from studydash.features.calendar.bucketer import (
    NON_COURSE_COLOR,
    bucket_of,
    build_day_view,
    build_month_view,
    build_week_view,
    display_time,
    hour_label,
    is_end_of_day_marker,
    items_for_day,
    items_for_slot,
    month_grid,
    parse_timestamp,
    resolve_timezone,
    week_days,
)
from studydash.features.calendar.schemas import Event
from studydash.features.tasks.schemas import Task

NEW_YORK = ZoneInfo("America/New_York")
SENTINEL = "2025-11-06T23:59:59+00:00"


def event(id, title, start, provider="canvas"):
    return Event(id=id, title=title, start_time=start, end_time=start, source_provider=provider)


# -- sentinel handling --

class TestEndOfDayMarker:
    @pytest.mark.parametrize("tz_name", [
        "America/New_York",
        "America/Los_Angeles",
        "Pacific/Honolulu",
        "Asia/Tokyo",
        "UTC",
    ])
    def test_canvas_sentinel_pinned_to_hour_23(self, tz_name):
        assert bucket_of(SENTINEL, "canvas", ZoneInfo(tz_name)) == (date(2025, 11, 6), 23)

    def test_short_offset_form(self):
        assert bucket_of("2025-11-06 23:59:59+00", "canvas", NEW_YORK) == (date(2025, 11, 6), 23)

    def test_non_canvas_is_converted(self):
        assert not is_end_of_day_marker(SENTINEL, "manual")
        assert bucket_of(SENTINEL, "manual", NEW_YORK) == (date(2025, 11, 6), 18)

    def test_display_label(self):
        assert display_time(SENTINEL, "canvas", NEW_YORK) == "11:59 PM"

    def test_regular_time_display(self):
        assert display_time("2025-11-06T14:30:00Z", "canvas", NEW_YORK) == "09:30 AM"

    def test_missing_time(self):
        assert bucket_of(None, "canvas", NEW_YORK) is None
        assert display_time("not a date", "manual", NEW_YORK) == ""


class TestParsing:
    def test_naive_is_utc(self):
        assert parse_timestamp("2025-11-06T12:00:00").utcoffset().total_seconds() == 0

    def test_zulu(self):
        assert parse_timestamp("2025-11-06T12:00:00Z").hour == 12

    def test_date_only(self):
        parsed = parse_timestamp("2025-11-06")
        assert (parsed.year, parsed.month, parsed.day, parsed.hour) == (2025, 11, 6, 0)

    def test_short_fractions(self):
        assert parse_timestamp("2025-11-06T12:00:00.12+00:00").microsecond == 120000
        assert parse_timestamp("2025-11-06T12:00:00.5+00").microsecond == 500000
        assert parse_timestamp("2025-11-06T12:00:00.1234567Z").microsecond == 123456

    def test_unknown_timezone_falls_back(self):
        assert resolve_timezone("Mars/Olympus", "America/New_York").key == "America/New_York"
        assert resolve_timezone(None, "UTC").key == "UTC"
        assert resolve_timezone("Asia/Tokyo", "UTC").key == "Asia/Tokyo"

    def test_hour_labels(self):
        assert hour_label(0) == "12 AM"
        assert hour_label(9) == "9 AM"
        assert hour_label(12) == "12 PM"
        assert hour_label(23) == "11 PM"


# -- bucket queries --

class TestBucketQueries:
    def test_items_for_day_and_slot(self):
        items = [
            event("e1", "[2025FA-PSY-100-007] Essay", SENTINEL),
            event("e2", "Lunch", "2025-11-06T17:00:00+00:00", provider="manual"),
            Task(id="t1", title="Reading", due_date="2025-11-07T15:00:00+00:00"),
        ]
        day = date(2025, 11, 6)
        assert [i.id for i in items_for_day(items, day, NEW_YORK)] == ["e1", "e2"]
        assert [i.id for i in items_for_slot(items, day, 23, NEW_YORK)] == ["e1"]
        assert [i.id for i in items_for_slot(items, day, 12, NEW_YORK)] == ["e2"]


# -- grid ranges --

class TestGridRanges:
    def test_week_starts_sunday(self):
        days = week_days(date(2025, 11, 6))
        assert days[0] == date(2025, 11, 2)
        assert days[-1] == date(2025, 11, 8)

    def test_month_grid_covers_full_weeks(self):
        days = month_grid(date(2025, 11, 15))
        assert days[0] == date(2025, 10, 26)
        assert days[-1] == date(2025, 12, 6)
        assert len(days) % 7 == 0


# -- view builders --

class TestViews:
    def test_day_view_places_sentinel_at_11pm(self):
        events = [event("e1", "[2025FA-PSY-100-007] Essay", SENTINEL)]
        view = build_day_view(date(2025, 11, 6), events, [], NEW_YORK, today=date(2025, 11, 6))
        column = view.days[0]
        assert column.is_today
        assert len(column.slots) == 24
        placed = column.slots[23].items
        assert len(placed) == 1
        assert placed[0].display_time == "11:59 PM"
        assert placed[0].course_code == "PSY-100"
        assert placed[0].color == "#f59e0b"

    def test_non_course_items_are_gray(self):
        events = [event("e1", "Dentist", "2025-11-06T15:00:00+00:00", provider="manual")]
        view = build_day_view(date(2025, 11, 6), events, [], NEW_YORK)
        item = view.days[0].slots[10].items[0]
        assert item.color == NON_COURSE_COLOR
        assert item.course_code is None

    def test_saved_color_used(self):
        events = [event("e1", "[2025FA-PSY-100-007] Essay", SENTINEL)]
        view = build_day_view(date(2025, 11, 6), events, [], NEW_YORK, colors={"PSY-100": "#222222"})
        assert view.days[0].slots[23].items[0].color == "#222222"

    def test_week_view(self):
        tasks = [Task(id="t1", title="Reading", due_date="2025-11-04T14:00:00+00:00")]
        view = build_week_view(date(2025, 11, 6), [], tasks, NEW_YORK, today=date(2025, 11, 6))
        assert view.view == "week"
        assert (view.start, view.end) == (date(2025, 11, 2), date(2025, 11, 8))
        tuesday = view.days[2]
        assert tuesday.slots[9].items[0].kind == "task"
        assert view.days[4].is_today

    def test_month_view_lists_items_per_day(self):
        events = [
            event("e1", "[2025FA-PSY-100-007] Essay", SENTINEL),
            event("e2", "[2025FA-MU-100-001] Listening", "2025-11-06T13:00:00+00:00"),
        ]
        view = build_month_view(date(2025, 11, 1), events, [], NEW_YORK, today=date(2025, 11, 1))
        assert view.timezone == "America/New_York"
        by_date = {d.date: d for d in view.days}
        assert [i.id for i in by_date[date(2025, 11, 6)].items] == ["e2", "e1"]
        assert not by_date[date(2025, 10, 26)].in_month
        assert by_date[date(2025, 11, 30)].in_month
