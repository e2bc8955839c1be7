"""
Courses feature: Service layer for the course tracking view.

Flow: check dashboard cache → fetch Canvas events, Canvas tasks and course
settings concurrently → aggregate → cache (unless the load was overtaken).
"""

import asyncio
import logging
from datetime import datetime, timezone

from supabase import Client

from studydash.config import get_settings
from studydash.core.cache import DashboardCache, Resource
from studydash.core.exceptions import DataStoreError, InvalidSettingError
from studydash.core.loads import LoadTracker
from studydash.core.notifications import DataChange, EventBus
from studydash.features.calendar.service import CalendarService
from studydash.features.courses.aggregator import aggregate_courses, latest_term
from studydash.features.courses.appearance import IconId, is_hex_color
from studydash.features.courses.extractor import CANVAS_PROVIDER
from studydash.features.courses.schemas import CourseList
from studydash.features.settings.service import (
    COURSE_COLORS,
    COURSE_ICONS,
    COURSE_ORDER,
    COURSE_SETTING_TYPES,
    SettingsService,
    string_map,
)
from studydash.features.tasks.service import TasksService

logger = logging.getLogger(__name__)


def _saved_order(data) -> list[str] | None:
    if not isinstance(data, dict) or not isinstance(data.get("order"), list):
        return None
    return [code for code in data["order"] if isinstance(code, str)]


class CoursesService:
    """Builds the course list and persists the user's course customizations."""

    def __init__(
        self,
        db: Client,
        cache: DashboardCache | None = None,
        tracker: LoadTracker | None = None,
        bus: EventBus | None = None,
    ):
        self.db = db
        self.cache = cache
        self.tracker = tracker or LoadTracker()
        self.bus = bus
        self.settings = get_settings()
        self.calendar = CalendarService(db)
        self.tasks = TasksService(db)
        self.user_settings = SettingsService(db)

    # ── Course list ──────────────────────────────────────

    async def get_courses(self, user_id: str, now: datetime | None = None) -> CourseList:
        if self.cache is not None:
            cached = self.cache.get(user_id, Resource.COURSES)
            if cached is not None:
                return cached

        ticket = self.tracker.begin(user_id)
        try:
            events, tasks, saved = await asyncio.gather(
                asyncio.to_thread(self.calendar.list_events, user_id, CANVAS_PROVIDER),
                asyncio.to_thread(self.tasks.list_tasks, user_id, None, CANVAS_PROVIDER),
                asyncio.to_thread(self.user_settings.get_many, user_id, COURSE_SETTING_TYPES),
            )
        except DataStoreError:
            stale = self.cache.get_stale(user_id, Resource.COURSES) if self.cache is not None else None
            if stale is not None:
                logger.warning(f"Serving last-known courses for {user_id[:8]} after a failed load")
                return stale
            raise

        courses = aggregate_courses(
            events,
            tasks,
            colors=string_map(saved[COURSE_COLORS], COURSE_COLORS),
            icons=string_map(saved[COURSE_ICONS], COURSE_ICONS),
            saved_order=_saved_order(saved[COURSE_ORDER]),
            now=now or datetime.now(timezone.utc),
            default_term=self.settings.DEFAULT_TERM,
        )
        result = CourseList(term=latest_term(c.term for c in courses), courses=courses)
        logger.info(
            f"Built {len(courses)} courses for {user_id[:8]} "
            f"from {len(events)} events / {len(tasks)} tasks"
        )

        if self.cache is not None:
            if ticket.is_current:
                self.cache.set(user_id, Resource.COURSES, result)
            else:
                logger.info(f"Discarding overtaken course load for {user_id[:8]}")
        return result

    # ── Customizations ───────────────────────────────────

    def _changed(self, user_id: str, setting: str):
        if self.bus is not None:
            self.bus.publish(DataChange.DATA_REFRESH, user_id, {"setting": setting})

    def save_order(self, user_id: str, order: list[str]) -> list[str]:
        """Persist the course order. Duplicates keep their first position."""
        cleaned = list(dict.fromkeys(code.strip() for code in order if code and code.strip()))
        self.user_settings.upsert(user_id, COURSE_ORDER, {"order": cleaned})
        self._changed(user_id, COURSE_ORDER)
        return cleaned

    def save_color(self, user_id: str, code: str, color: str) -> dict[str, str]:
        if not is_hex_color(color):
            raise InvalidSettingError(
                f"'{color}' is not a hex color",
                "Use #rgb or #rrggbb.",
            )
        colors = string_map(self.user_settings.get(user_id, COURSE_COLORS), COURSE_COLORS)
        colors[code] = color.lower()
        self.user_settings.upsert(user_id, COURSE_COLORS, colors)
        self._changed(user_id, COURSE_COLORS)
        return colors

    def save_icon(self, user_id: str, code: str, icon: IconId) -> dict[str, str]:
        icons = string_map(self.user_settings.get(user_id, COURSE_ICONS), COURSE_ICONS)
        icons[code] = IconId(icon).value
        self.user_settings.upsert(user_id, COURSE_ICONS, icons)
        self._changed(user_id, COURSE_ICONS)
        return icons

    def reset_customizations(self, user_id: str) -> int:
        """Forget saved colors, icons and order."""
        deleted = self.user_settings.delete(user_id, COURSE_SETTING_TYPES)
        self._changed(user_id, "reset")
        return deleted
