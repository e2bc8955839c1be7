"""
Tasks feature: assignment filtering, status and priority labels.

Shared by every endpoint that lists assignments so that "how old is too old"
and "what counts as overdue" are decided in one place.
"""

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from studydash.features.calendar.bucketer import bucket_of, is_end_of_day_marker, parse_timestamp
from studydash.features.calendar.schemas import Event
from studydash.features.courses.extractor import CANVAS_PROVIDER
from studydash.features.tasks.schemas import AssignmentView, Task

PRIORITY_LABELS = {
    4: "Critical",
    3: "High",
    2: "Medium",
    1: "Low",
    0: "No Priority",
}


def priority_label(score: float | None) -> str:
    if score is None:
        return PRIORITY_LABELS[0]
    return PRIORITY_LABELS.get(int(score), PRIORITY_LABELS[0])


def _cutoff(now: datetime, tz: ZoneInfo, lookback_days: int) -> datetime:
    """Local midnight today, minus the lookback window."""
    today = now.astimezone(tz).date()
    return datetime.combine(today, time.min, tzinfo=tz) - timedelta(days=lookback_days)


def due_moment(item: Event | Task, tz: ZoneInfo) -> datetime | None:
    """Aware due time. Canvas end-of-day markers mean 23:59:59 local on the written date."""
    raw = item.due_time
    if is_end_of_day_marker(raw, item.source_provider):
        bucket = bucket_of(raw, item.source_provider, tz)
        if bucket is None:
            return None
        return datetime.combine(bucket[0], time(23, 59, 59), tzinfo=tz)
    return parse_timestamp(raw)


def is_canvas_assignment(event: Event) -> bool:
    return event.source_provider == CANVAS_PROVIDER and event.event_type == "assignment"


def filter_recent_events(events: list[Event], now: datetime, tz: ZoneInfo, lookback_days: int = 7) -> list[Event]:
    """Drop Canvas assignments more than lookback_days old. Other events pass."""
    cutoff = _cutoff(now, tz, lookback_days)
    kept = []
    for event in events:
        if is_canvas_assignment(event):
            when = due_moment(event, tz)
            if when is not None and when < cutoff:
                continue
        kept.append(event)
    return kept


def filter_recent_tasks(tasks: list[Task], now: datetime, tz: ZoneInfo, lookback_days: int = 7) -> list[Task]:
    """Drop manual tasks (no provider) due more than lookback_days ago."""
    cutoff = _cutoff(now, tz, lookback_days)
    kept = []
    for task in tasks:
        if task.due_date and not task.source_provider:
            due = parse_timestamp(task.due_date)
            if due is not None and due < cutoff:
                continue
        kept.append(task)
    return kept


def assignment_status(item: Event | Task, now: datetime, tz: ZoneInfo) -> str:
    if item.is_done:
        return "completed"

    due = due_moment(item, tz)
    if due is None:
        return "upcoming"
    if due < now:
        return "overdue"

    due_day = due.astimezone(tz).date()
    today = now.astimezone(tz).date()
    if due_day == today:
        return "due-today"
    if due_day == today + timedelta(days=1):
        return "due-tomorrow"
    return "upcoming"


def build_assignment_list(
    events: list[Event],
    tasks: list[Task],
    now: datetime,
    tz: ZoneInfo,
    lookback_days: int = 7,
) -> list[AssignmentView]:
    """Recent Canvas assignments and tasks with status, soonest due first."""
    ranked = []
    for event in filter_recent_events(events, now, tz, lookback_days):
        if not is_canvas_assignment(event):
            continue
        ranked.append((due_moment(event, tz), AssignmentView(
            kind="event",
            id=event.id,
            title=event.title,
            due=event.due_time,
            status=assignment_status(event, now, tz),
            source_provider=event.source_provider,
        )))

    for task in filter_recent_tasks(tasks, now, tz, lookback_days):
        ranked.append((due_moment(task, tz), AssignmentView(
            kind="task",
            id=task.id,
            title=task.title,
            due=task.due_date,
            status=assignment_status(task, now, tz),
            priority=priority_label(task.priority_score),
            source_provider=task.source_provider,
        )))

    ranked.sort(key=lambda pair: (pair[0] is None, pair[0] or now))
    return [view for _, view in ranked]
