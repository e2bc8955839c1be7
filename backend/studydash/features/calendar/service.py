"""
Calendar feature: Service layer for calendar event management.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
from supabase import Client

from studydash.config import get_settings
from studydash.core.cache import DashboardCache, Resource
from studydash.core.database import run_query
from studydash.core.exceptions import NotFoundError
from studydash.core.loads import LoadTracker
from studydash.core.notifications import DataChange, EventBus
from studydash.features.calendar.bucketer import (
    build_day_view,
    build_month_view,
    build_week_view,
    resolve_timezone,
)
from studydash.features.calendar.schemas import CalendarView, Event
from studydash.features.settings.service import COURSE_COLORS, SettingsService, string_map
from studydash.features.tasks.filters import build_assignment_list
from studydash.features.tasks.schemas import AssignmentView, Task
from studydash.features.tasks.service import TasksService


class CalendarService:
    """CRUD operations for calendar events with date range queries."""

    def __init__(self, db: Client, bus: EventBus | None = None):
        self.db = db
        self.bus = bus

    def _notify(self, kind: DataChange, user_id: str, payload: dict | None = None):
        if self.bus is not None:
            self.bus.publish(kind, user_id, payload)

    def create_event(
        self,
        user_id: str,
        title: str,
        start_time: str,
        end_time: str | None = None,
        description: str | None = None,
        event_type: str = "personal",
        is_all_day: bool = False,
        location: str | None = None,
        source_provider: str = "manual",
    ) -> Event:
        insert_data = {
            "user_id": user_id,
            "title": title,
            "description": description,
            "event_type": event_type,
            "start_time": start_time,
            "end_time": end_time or start_time,
            "is_all_day": is_all_day,
            "location": location,
            "source_provider": source_provider,
            "is_completed": False,
        }
        result = run_query(self.db.table("events").insert(insert_data), "create event")
        event = Event(**result.data[0])
        self._notify(DataChange.EVENT_CREATED, user_id, {"event_id": event.id})
        return event

    def list_events(self, user_id: str, source_provider: str | None = None) -> list[Event]:
        """Every event of the user, optionally from one provider."""
        query = self.db.table("events").select("*").eq("user_id", user_id)
        if source_provider:
            query = query.eq("source_provider", source_provider)
        result = run_query(query.order("start_time", desc=False), "list events")
        return [Event(**row) for row in result.data or []]

    def get_events(
        self,
        user_id: str,
        start: datetime | None = None,
        days_range: int = 7,
        event_type: str | None = None,
    ) -> list[Event]:
        """Get events for a user within a date range.

        Args:
            user_id: User's UUID
            start: Range start (aware datetime), defaults to now
            days_range: Number of days to look ahead (default 7)
            event_type: Filter by event type
        """
        start = start or datetime.now().astimezone()
        end = start + timedelta(days=days_range)

        query = (
            self.db.table("events")
            .select("*")
            .eq("user_id", user_id)
            .gte("start_time", start.isoformat())
            .lt("start_time", end.isoformat())
        )

        if event_type:
            query = query.eq("event_type", event_type)

        result = run_query(query.order("start_time", desc=False), "get events")
        return [Event(**row) for row in result.data or []]

    def get_event_by_id(self, user_id: str, event_id: str) -> Event | None:
        """Get a single event by ID."""
        result = run_query(
            self.db.table("events").select("*").eq("id", event_id).eq("user_id", user_id),
            "get event",
        )
        return Event(**result.data[0]) if result.data else None

    def update_event(self, user_id: str, event_id: str, update_data: dict) -> Event:
        """Update an existing event. None values are left untouched."""
        clean_data = {k: v for k, v in update_data.items() if v is not None}
        if not clean_data:
            event = self.get_event_by_id(user_id, event_id)
            if event is None:
                raise NotFoundError("Event", event_id)
            return event

        result = run_query(
            self.db.table("events").update(clean_data).eq("id", event_id).eq("user_id", user_id),
            "update event",
        )
        if not result.data:
            raise NotFoundError("Event", event_id)
        self._notify(DataChange.EVENT_UPDATED, user_id, {"event_id": event_id})
        return Event(**result.data[0])

    def set_completed(self, user_id: str, event_id: str, completed: bool) -> Event:
        return self.update_event(user_id, event_id, {"is_completed": completed})

    def delete_event(self, user_id: str, event_id: str) -> None:
        """Hard delete an event."""
        result = run_query(
            self.db.table("events").delete().eq("id", event_id).eq("user_id", user_id),
            "delete event",
        )
        if not result.data:
            raise NotFoundError("Event", event_id)
        self._notify(DataChange.EVENT_DELETED, user_id, {"event_id": event_id})

    def clear_provider_events(self, user_id: str, source_provider: str) -> int:
        """Bulk delete every event synced from one provider. Returns the count."""
        result = run_query(
            self.db.table("events")
            .delete()
            .eq("user_id", user_id)
            .eq("source_provider", source_provider),
            "clear events",
        )
        count = len(result.data) if result.data else 0
        self._notify(DataChange.EVENTS_CLEARED, user_id, {"source_provider": source_provider, "count": count})
        return count


class CalendarViewService:
    """Day/week/month grids over every event and task of the user."""

    def __init__(
        self,
        db: Client,
        cache: DashboardCache | None = None,
        tracker: LoadTracker | None = None,
    ):
        self.db = db
        self.cache = cache
        self.tracker = tracker or LoadTracker()
        self.settings = get_settings()
        self.events = CalendarService(db)
        self.tasks = TasksService(db)
        self.user_settings = SettingsService(db)

    async def _load(self, user_id: str) -> tuple[list[Event], list[Task], dict[str, str], str | None]:
        if self.cache is not None:
            cached = self.cache.get(user_id, Resource.CALENDAR)
            if cached is not None:
                return cached

        ticket = self.tracker.begin(user_id)
        events, tasks, colors, tz_name = await asyncio.gather(
            asyncio.to_thread(self.events.list_events, user_id),
            asyncio.to_thread(self.tasks.list_tasks, user_id),
            asyncio.to_thread(self.user_settings.get, user_id, COURSE_COLORS),
            asyncio.to_thread(self.user_settings.get_timezone, user_id),
        )
        colors = string_map(colors, COURSE_COLORS)
        rows = (events, tasks, colors, tz_name)

        if self.cache is not None and ticket.is_current:
            self.cache.set(user_id, Resource.CALENDAR, rows)
        return rows

    async def get_view(self, user_id: str, view: str, anchor: date | None = None) -> CalendarView:
        events, tasks, colors, tz_name = await self._load(user_id)
        tz = resolve_timezone(tz_name, self.settings.DEFAULT_TIMEZONE)
        today = datetime.now(tz).date()
        anchor = anchor or today

        builders = {
            "day": build_day_view,
            "week": build_week_view,
            "month": build_month_view,
        }
        if view not in builders:
            raise ValueError(f"Unknown calendar view '{view}'")
        return builders[view](anchor, events, tasks, tz, today=today, colors=colors)

    async def get_assignments(self, user_id: str, now: datetime | None = None) -> list[AssignmentView]:
        events, tasks, _, tz_name = await self._load(user_id)
        tz = resolve_timezone(tz_name, self.settings.DEFAULT_TIMEZONE)
        return build_assignment_list(
            events,
            tasks,
            now or datetime.now(timezone.utc),
            tz,
            self.settings.ASSIGNMENT_LOOKBACK_DAYS,
        )
