"""
Calendar feature: Schemas for request/response models.
"""

from datetime import date
from pydantic import BaseModel, ConfigDict


class Event(BaseModel):
    """A row of the events table.

    Timestamps stay as the raw strings the store returns; the bucketer
    inspects them before parsing.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    start_time: str
    end_time: str | None = None
    event_type: str | None = None
    source_provider: str | None = None
    is_completed: bool | None = False
    is_all_day: bool | None = False
    description: str | None = None
    location: str | None = None

    @property
    def calendar_time(self) -> str | None:
        return self.start_time

    @property
    def due_time(self) -> str | None:
        return self.end_time or self.start_time

    @property
    def is_done(self) -> bool:
        return bool(self.is_completed)


class EventCreate(BaseModel):
    """Request to create a new calendar event."""
    title: str
    description: str | None = None
    event_type: str = "personal"
    start_time: str  # ISO 8601 with offset
    end_time: str | None = None
    is_all_day: bool = False
    location: str | None = None


class EventUpdate(BaseModel):
    """Request to update an existing event."""
    title: str | None = None
    description: str | None = None
    event_type: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    is_all_day: bool | None = None
    location: str | None = None


class CompletionUpdate(BaseModel):
    completed: bool


# ── Grid views ───────────────────────────────────────────

class GridItem(BaseModel):
    """An event or task placed in a bucket."""
    kind: str                 # "event" | "task"
    id: str
    title: str
    display_time: str         # "11:59 PM"
    source_provider: str | None = None
    completed: bool = False
    course_code: str | None = None
    color: str | None = None


class HourSlot(BaseModel):
    hour: int
    label: str                # "9 AM"
    items: list[GridItem] = []


class DayColumn(BaseModel):
    date: date
    is_today: bool = False
    in_month: bool = True
    slots: list[HourSlot] = []
    items: list[GridItem] = []   # whole-day listing (month view)


class CalendarView(BaseModel):
    view: str                 # "day" | "week" | "month"
    timezone: str
    start: date
    end: date
    days: list[DayColumn]
