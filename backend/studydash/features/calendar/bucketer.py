"""
Calendar feature: placing events and tasks into day/hour buckets.

Canvas stores "due at end of day" as 23:59:59 UTC. Converting that to the
viewer's timezone would move it to the afternoon (or the next morning), so
those items are recognized from the raw string, before any parsing, and
pinned to 11:59 PM on the date written in the string.
"""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from studydash.features.calendar.schemas import (
    CalendarView,
    DayColumn,
    Event,
    GridItem,
    HourSlot,
)
from studydash.features.courses.appearance import resolve_color
from studydash.features.courses.extractor import CANVAS_PROVIDER, extract_course_code
from studydash.features.tasks.schemas import Task

logger = logging.getLogger(__name__)

CalendarItem = Union[Event, Task]

END_OF_DAY_MARKER = "23:59:59+00"
END_OF_DAY_HOUR = 23
END_OF_DAY_LABEL = "11:59 PM"
NON_COURSE_COLOR = "#6b7280"  # gray-500

_SHORT_OFFSET = re.compile(r"(:\d{2}(?:\.\d+)?)([+-]\d{2})$")
_FRACTION = re.compile(r"(?<=:\d{2})\.(\d+)")


# ── Timestamps & timezones ───────────────────────────────

def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from the store. Naive values are taken as UTC."""
    if not raw:
        return None
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _SHORT_OFFSET.sub(r"\1\2:00", value)
    # fromisoformat before 3.11 wants exactly 3 or 6 fractional digits
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def resolve_timezone(name: str | None, default: str) -> ZoneInfo:
    """ZoneInfo for the user's timezone, falling back to the configured default."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{name}', using {default}")
    return ZoneInfo(default)


def is_end_of_day_marker(raw: str | None, source_provider: str | None) -> bool:
    """Canvas end-of-day sentinel. Must be checked on the raw string."""
    return source_provider == CANVAS_PROVIDER and bool(raw) and END_OF_DAY_MARKER in raw


def bucket_of(raw: str | None, source_provider: str | None, tz: ZoneInfo) -> tuple[date, int] | None:
    """(local date, local hour) an item belongs to, or None if it has no usable time."""
    if is_end_of_day_marker(raw, source_provider):
        try:
            return date.fromisoformat(raw.strip()[:10]), END_OF_DAY_HOUR
        except ValueError:
            return None

    dt = parse_timestamp(raw)
    if dt is None:
        return None
    local = dt.astimezone(tz)
    return local.date(), local.hour


def display_time(raw: str | None, source_provider: str | None, tz: ZoneInfo) -> str:
    if is_end_of_day_marker(raw, source_provider):
        return END_OF_DAY_LABEL
    dt = parse_timestamp(raw)
    if dt is None:
        return ""
    return dt.astimezone(tz).strftime("%I:%M %p")


def hour_label(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12} {suffix}"


# ── Bucket queries ───────────────────────────────────────

def items_for_day(items: Iterable[CalendarItem], day: date, tz: ZoneInfo) -> list[CalendarItem]:
    result = []
    for item in items:
        bucket = bucket_of(item.calendar_time, item.source_provider, tz)
        if bucket and bucket[0] == day:
            result.append(item)
    return result


def items_for_slot(items: Iterable[CalendarItem], day: date, hour: int, tz: ZoneInfo) -> list[CalendarItem]:
    result = []
    for item in items:
        bucket = bucket_of(item.calendar_time, item.source_provider, tz)
        if bucket == (day, hour):
            result.append(item)
    return result


# ── Grid ranges ──────────────────────────────────────────

def week_start(day: date) -> date:
    """Sunday on or before the given day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_days(anchor: date) -> list[date]:
    start = week_start(anchor)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(anchor: date) -> list[date]:
    """Every day of the full weeks covering anchor's month."""
    first = anchor.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    last = next_month - timedelta(days=1)

    start = week_start(first)
    end = week_start(last) + timedelta(days=6)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def time_slots() -> list[HourSlot]:
    return [HourSlot(hour=h, label=hour_label(h)) for h in range(24)]


# ── View builders ────────────────────────────────────────

def _grid_item(item: CalendarItem, tz: ZoneInfo, colors: dict[str, str] | None) -> GridItem:
    is_canvas = item.source_provider == CANVAS_PROVIDER
    match = extract_course_code(item.title, is_canvas)
    if match:
        color = resolve_color(match.code, colors)
    else:
        color = None if is_canvas else NON_COURSE_COLOR

    return GridItem(
        kind="task" if isinstance(item, Task) else "event",
        id=item.id,
        title=item.title,
        display_time=display_time(item.calendar_time, item.source_provider, tz),
        source_provider=item.source_provider,
        completed=item.is_done,
        course_code=match.code if match else None,
        color=color,
    )


def _place(
    events: Iterable[Event],
    tasks: Iterable[Task],
    tz: ZoneInfo,
    colors: dict[str, str] | None,
) -> dict[date, list[tuple[int, GridItem]]]:
    placed: dict[date, list[tuple[int, GridItem]]] = {}
    for item in [*events, *tasks]:
        bucket = bucket_of(item.calendar_time, item.source_provider, tz)
        if bucket is None:
            continue
        day, hour = bucket
        placed.setdefault(day, []).append((hour, _grid_item(item, tz, colors)))
    return placed


def _column(day: date, placed: list[tuple[int, GridItem]], today: date, with_slots: bool, in_month: bool = True) -> DayColumn:
    column = DayColumn(date=day, is_today=day == today, in_month=in_month)
    ordered = sorted(placed, key=lambda p: p[0])
    if with_slots:
        slots = time_slots()
        for hour, grid_item in ordered:
            slots[hour].items.append(grid_item)
        column.slots = slots
    else:
        column.items = [grid_item for _, grid_item in ordered]
    return column


def build_day_view(
    day: date,
    events: list[Event],
    tasks: list[Task],
    tz: ZoneInfo,
    today: date | None = None,
    colors: dict[str, str] | None = None,
) -> CalendarView:
    today = today or datetime.now(tz).date()
    placed = _place(events, tasks, tz, colors)
    return CalendarView(
        view="day",
        timezone=tz.key,
        start=day,
        end=day,
        days=[_column(day, placed.get(day, []), today, with_slots=True)],
    )


def build_week_view(
    anchor: date,
    events: list[Event],
    tasks: list[Task],
    tz: ZoneInfo,
    today: date | None = None,
    colors: dict[str, str] | None = None,
) -> CalendarView:
    today = today or datetime.now(tz).date()
    placed = _place(events, tasks, tz, colors)
    days = week_days(anchor)
    return CalendarView(
        view="week",
        timezone=tz.key,
        start=days[0],
        end=days[-1],
        days=[_column(d, placed.get(d, []), today, with_slots=True) for d in days],
    )


def build_month_view(
    anchor: date,
    events: list[Event],
    tasks: list[Task],
    tz: ZoneInfo,
    today: date | None = None,
    colors: dict[str, str] | None = None,
) -> CalendarView:
    today = today or datetime.now(tz).date()
    placed = _place(events, tasks, tz, colors)
    days = month_grid(anchor)
    return CalendarView(
        view="month",
        timezone=tz.key,
        start=days[0],
        end=days[-1],
        days=[
            _column(d, placed.get(d, []), today, with_slots=False, in_month=d.month == anchor.month)
            for d in days
        ],
    )
