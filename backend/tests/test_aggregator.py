"""
Unit tests for grouping Canvas items into courses.
"""

from datetime import datetime, timezone

from studydash.features.calendar.schemas import Event
from studydash.features.courses.aggregator import (
    aggregate_courses,
    compute_stats,
    filter_latest_term,
    group_courses,
    latest_term,
    match_task,
    order_courses,
)
from studydash.features.courses.appearance import IconId
from studydash.features.courses.extractor import CourseMatch
from studydash.features.courses.schemas import Course
from studydash.features.tasks.schemas import Task

NOW = datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc)


def canvas_event(id, title, start="2025-11-06T23:59:59+00:00", completed=False):
    return Event(
        id=id,
        title=title,
        start_time=start,
        end_time=start,
        event_type="assignment",
        source_provider="canvas",
        is_completed=completed,
    )


def canvas_task(id, title, course_name=None, due="2025-11-10T15:00:00+00:00", status="pending"):
    return Task(
        id=id,
        title=title,
        due_date=due,
        completion_status=status,
        course_name=course_name,
        source_provider="canvas",
    )


def course(code, term="2025FA"):
    return Course(code=code, term=term, color="#000000", icon=IconId.BOOK_OPEN)


# -- grouping --

class TestGroupCourses:
    def test_groups_by_term_and_code(self):
        events = [
            canvas_event("e1", "[2025FA-PSY-100-007] Essay"),
            canvas_event("e2", "[2025FA-PSY-100-008] Quiz"),
            canvas_event("e3", "[2025FA-MU-100-001] Listening"),
        ]
        groups = group_courses(events, [], "2025FA")
        assert list(groups) == ["2025FA-PSY-100", "2025FA-MU-100"]
        assert [e.id for e in groups["2025FA-PSY-100"].events] == ["e1", "e2"]

    def test_same_code_in_two_terms_stays_separate(self):
        events = [
            canvas_event("e1", "[2024SP-PSY-100-001] Old essay"),
            canvas_event("e2", "[2025FA-PSY-100-007] Essay"),
        ]
        groups = group_courses(events, [], "2025FA")
        assert set(groups) == {"2024SP-PSY-100", "2025FA-PSY-100"}

    def test_manual_items_are_ignored(self):
        manual = Event(id="m1", title="[2025FA-PSY-100-007] Study group", start_time="2025-11-06T18:00:00+00:00")
        assert group_courses([manual], [], "2025FA") == {}

    def test_task_course_name_uses_latest_event_term(self):
        events = [canvas_event("e1", "[2026SP-PSY-100-007] Essay")]
        tasks = [canvas_task("t1", "Reading", course_name="PSY-100")]
        groups = group_courses(events, tasks, "2025FA")
        assert [t.id for t in groups["2026SP-PSY-100"].tasks] == ["t1"]

    def test_task_course_name_default_term(self):
        tasks = [canvas_task("t1", "Reading", course_name="MU-100")]
        groups = group_courses([], tasks, "2025FA")
        assert list(groups) == ["2025FA-MU-100"]

    def test_task_course_name_with_own_term(self):
        tasks = [canvas_task("t1", "Quiz 4", course_name="MAC2311C_CMB-24Spring")]
        groups = group_courses([], tasks, "2025FA")
        assert list(groups) == ["2024SP-MAC2311C"]

    def test_task_title_fallback(self):
        task = canvas_task("t1", "[2025FA-HES-145-002] Journal")
        assert match_task(task, "2025FA") == CourseMatch("HES-145", "2025FA")

    def test_non_canvas_task_unmatched(self):
        task = Task(id="t1", title="[2025FA-HES-145-002] Journal")
        assert match_task(task, "2025FA") is None


# -- latest term --

class TestLatestTerm:
    def test_lexicographic_max(self):
        assert latest_term(["2024SP", "2025FA", None]) == "2025FA"

    def test_no_terms(self):
        assert latest_term([None, None]) is None

    def test_single_term_keeps_untagged(self):
        events = [
            canvas_event("e1", "[2025FA-PSY-100-007] Essay"),
            canvas_event("e2", "MATH-118 Homework"),
        ]
        groups = filter_latest_term(group_courses(events, [], "2025FA"))
        assert set(groups) == {"2025FA-PSY-100", "MATH-118"}

    def test_multiple_terms_drop_older_and_untagged(self):
        events = [
            canvas_event("e1", "[2024SP-PSY-100-001] Old essay"),
            canvas_event("e2", "[2025FA-PSY-100-007] Essay"),
            canvas_event("e3", "MATH-118 Homework"),
        ]
        groups = filter_latest_term(group_courses(events, [], "2025FA"))
        assert set(groups) == {"2025FA-PSY-100"}


# -- stats --

class TestComputeStats:
    def test_counts(self):
        events = [
            canvas_event("e1", "[2025FA-PSY-100-007] Essay", completed=True),
            canvas_event("e2", "[2025FA-PSY-100-007] Past quiz", start="2025-10-01T23:59:59+00:00"),
        ]
        tasks = [canvas_task("t1", "Reading", course_name="PSY-100")]
        group = group_courses(events, tasks, "2025FA")["2025FA-PSY-100"]
        total, completed, upcoming = compute_stats(group, NOW)
        assert total == 3
        assert completed == 1
        assert upcoming == 2

    def test_completed_task(self):
        tasks = [canvas_task("t1", "Reading", course_name="PSY-100", status="completed")]
        group = group_courses([], tasks, "2025FA")["2025FA-PSY-100"]
        assert compute_stats(group, NOW) == (1, 1, 1)


# -- ordering --

class TestOrderCourses:
    def test_saved_order_then_alphabetical(self):
        courses = [course("PSY-100"), course("BIO-200"), course("MATH-101")]
        ordered = order_courses(courses, ["MATH-101", "PSY-100"])
        assert [c.code for c in ordered] == ["MATH-101", "PSY-100", "BIO-200"]

    def test_no_saved_order_is_alphabetical(self):
        courses = [course("PSY-100"), course("BIO-200"), course("MATH-101")]
        assert [c.code for c in order_courses(courses, None)] == ["BIO-200", "MATH-101", "PSY-100"]

    def test_unknown_saved_codes_ignored(self):
        courses = [course("PSY-100"), course("BIO-200")]
        ordered = order_courses(courses, ["GONE-999", "PSY-100"])
        assert [c.code for c in ordered] == ["PSY-100", "BIO-200"]

    def test_duplicate_saved_code_uses_first_position(self):
        courses = [course("PSY-100"), course("MU-100")]
        ordered = order_courses(courses, ["PSY-100", "MU-100", "PSY-100"])
        assert [c.code for c in ordered] == ["PSY-100", "MU-100"]


# -- end to end --

class TestAggregateCourses:
    def test_single_assignment(self):
        events = [canvas_event("e1", "[2025FA-PSY-100-007] Essay")]
        courses = aggregate_courses(events, [], now=NOW)
        assert len(courses) == 1
        psy = courses[0]
        assert psy.code == "PSY-100"
        assert psy.term == "2025FA"
        assert psy.total_assignments == 1
        assert psy.completed_assignments == 0
        assert psy.color == "#f59e0b"
        assert psy.icon == IconId.BOOK_OPEN

    def test_total_equals_members(self):
        events = [
            canvas_event("e1", "[2025FA-PSY-100-007] Essay"),
            canvas_event("e2", "[2025FA-MU-100-001] Listening"),
        ]
        tasks = [canvas_task("t1", "Reading", course_name="PSY-100")]
        for c in aggregate_courses(events, tasks, now=NOW):
            assert c.total_assignments == len(c.events) + len(c.tasks)

    def test_customizations_applied(self):
        events = [canvas_event("e1", "[2025FA-PSY-100-007] Essay")]
        courses = aggregate_courses(
            events,
            [],
            colors={"PSY-100": "#111111"},
            icons={"PSY-100": "brain"},
            now=NOW,
        )
        assert courses[0].color == "#111111"
        assert courses[0].icon == IconId.BRAIN

    def test_latest_only_can_be_disabled(self):
        events = [
            canvas_event("e1", "[2024SP-PSY-100-001] Old essay"),
            canvas_event("e2", "[2025FA-PSY-100-007] Essay"),
        ]
        assert len(aggregate_courses(events, [], now=NOW)) == 1
        assert len(aggregate_courses(events, [], now=NOW, latest_only=False)) == 2

    def test_completion_ratio(self):
        events = [
            canvas_event("e1", "[2025FA-PSY-100-007] Essay", completed=True),
            canvas_event("e2", "[2025FA-PSY-100-007] Quiz"),
        ]
        assert aggregate_courses(events, [], now=NOW)[0].completion_ratio == 0.5
