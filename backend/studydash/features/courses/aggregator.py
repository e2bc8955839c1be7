"""
Courses feature: grouping Canvas events/tasks into courses.

Courses are rebuilt from scratch on every load; nothing here is updated
incrementally. Groups are keyed by term + code, so the same code taught in
two terms stays two courses.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable

from pydantic import BaseModel

from studydash.features.calendar.bucketer import parse_timestamp
from studydash.features.calendar.schemas import Event
from studydash.features.courses.appearance import resolve_color, resolve_icon
from studydash.features.courses.extractor import (
    CANVAS_PROVIDER,
    CourseMatch,
    extract_course_code,
    pseudo_title,
)
from studydash.features.courses.schemas import Course
from studydash.features.tasks.schemas import Task

logger = logging.getLogger(__name__)


class CourseGroup(BaseModel):
    code: str
    term: str | None = None
    events: list[Event] = []
    tasks: list[Task] = []

    @property
    def key(self) -> str:
        return group_key(CourseMatch(self.code, self.term))


def group_key(match: CourseMatch) -> str:
    return f"{match.term}-{match.code}" if match.term else match.code


def _is_canvas(item: Event | Task) -> bool:
    return item.source_provider == CANVAS_PROVIDER


def match_task(task: Task, default_term: str) -> CourseMatch | None:
    """Course of a task: its explicit course name first, then its title."""
    if not _is_canvas(task):
        return None
    if task.course_name and task.course_name.strip():
        match = extract_course_code(pseudo_title(task.course_name, default_term), True)
        if match:
            return match
    return extract_course_code(task.title, True)


def latest_term(terms: Iterable[str | None]) -> str | None:
    """Lexicographically greatest term tag ('2025FA' > '2024SP').

    This is a string comparison, not a calendar one: within a year 'SU' sorts
    after 'SP' and 'FA', and 'WI' after all of them.
    """
    tagged = [t for t in terms if t]
    return max(tagged) if tagged else None


def group_courses(
    events: Iterable[Event],
    tasks: Iterable[Task],
    default_term: str,
) -> dict[str, CourseGroup]:
    """Group Canvas events and tasks by extracted course, in first-seen order.

    Tasks that name a course without a term get the latest term found on the
    events, or default_term when the events carry none.
    """
    groups: dict[str, CourseGroup] = {}

    def group_for(match: CourseMatch) -> CourseGroup:
        key = group_key(match)
        if key not in groups:
            groups[key] = CourseGroup(code=match.code, term=match.term)
        return groups[key]

    for event in events:
        match = extract_course_code(event.title, _is_canvas(event))
        if match:
            group_for(match).events.append(event)

    task_term = latest_term(g.term for g in groups.values()) or default_term
    for task in tasks:
        match = match_task(task, task_term)
        if match:
            group_for(match).tasks.append(task)

    return groups


def filter_latest_term(groups: dict[str, CourseGroup]) -> dict[str, CourseGroup]:
    """Keep only the most recent term's courses when several terms are present."""
    terms = {g.term for g in groups.values() if g.term}
    if len(terms) < 2:
        return groups
    latest = latest_term(terms)
    logger.info(f"Showing {latest} courses only (terms present: {sorted(terms)})")
    return {k: g for k, g in groups.items() if g.term == latest}


def _is_upcoming(raw: str | None, now: datetime) -> bool:
    due = parse_timestamp(raw)
    return due is not None and due >= now


def compute_stats(group: CourseGroup, now: datetime) -> tuple[int, int, int]:
    """(total, completed, upcoming) for a group."""
    items = [*group.events, *group.tasks]
    total = len(items)
    completed = sum(1 for item in items if item.is_done)
    upcoming = sum(1 for item in items if _is_upcoming(item.due_time, now))
    return total, completed, upcoming


def order_courses(courses: list[Course], saved_order: list[str] | None) -> list[Course]:
    """Saved order first, by position; everything else alphabetically after it."""
    if not saved_order:
        return sorted(courses, key=lambda c: (c.code, c.term or ""))

    position = {}
    for index, code in enumerate(saved_order):
        position.setdefault(code, index)

    def sort_key(course: Course):
        if course.code in position:
            return (0, position[course.code], "", course.term or "")
        return (1, 0, course.code, course.term or "")

    return sorted(courses, key=sort_key)


def aggregate_courses(
    events: Iterable[Event],
    tasks: Iterable[Task],
    *,
    colors: dict[str, str] | None = None,
    icons: dict[str, str] | None = None,
    saved_order: list[str] | None = None,
    now: datetime | None = None,
    default_term: str = "2025FA",
    latest_only: bool = True,
) -> list[Course]:
    """Full pipeline: group, filter to the latest term, annotate, count, order."""
    now = now or datetime.now(timezone.utc)
    groups = group_courses(events, tasks, default_term)
    if latest_only:
        groups = filter_latest_term(groups)

    courses = []
    for group in groups.values():
        total, completed, upcoming = compute_stats(group, now)
        courses.append(Course(
            code=group.code,
            term=group.term,
            color=resolve_color(group.code, colors),
            icon=resolve_icon(group.code, icons),
            events=group.events,
            tasks=group.tasks,
            total_assignments=total,
            completed_assignments=completed,
            upcoming_assignments=upcoming,
        ))

    return order_courses(courses, saved_order)
