"""
Calendar feature: API routes for event management and calendar grids.
"""

from datetime import date as Date
from datetime import datetime, time

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from studydash.config import get_settings
from studydash.core.cache import DashboardCache
from studydash.core.dependencies import (
    get_cache,
    get_current_user_id,
    get_db,
    get_event_bus,
    get_load_tracker,
)
from studydash.core.exceptions import DataStoreError, NotFoundError, app_error_to_http
from studydash.core.loads import LoadTracker
from studydash.core.notifications import EventBus
from studydash.features.calendar.bucketer import resolve_timezone
from studydash.features.calendar.schemas import CompletionUpdate, EventCreate, EventUpdate
from studydash.features.calendar.service import CalendarService, CalendarViewService
from studydash.features.courses.extractor import CANVAS_PROVIDER
from studydash.features.settings.service import SettingsService

router = APIRouter()

VIEWS = ("day", "week", "month")


def _service(
    db: Client = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> CalendarService:
    return CalendarService(db, bus=bus)


def _view_service(
    db: Client = Depends(get_db),
    cache: DashboardCache = Depends(get_cache),
    tracker: LoadTracker = Depends(get_load_tracker),
) -> CalendarViewService:
    return CalendarViewService(db, cache=cache, tracker=tracker)


@router.get("/")
async def list_events(
    date: Date | None = None,
    event_type: str | None = None,
    days_ahead: int = 7,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """List events within a date range starting at local midnight of `date`."""
    settings = get_settings()
    tz = resolve_timezone(SettingsService(db).get_timezone(user_id), settings.DEFAULT_TIMEZONE)
    start = datetime.combine(date or datetime.now(tz).date(), time.min, tzinfo=tz)
    try:
        events = CalendarService(db).get_events(user_id, start, days_ahead, event_type)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": events}


@router.get("/view/{view}")
async def get_view(
    view: str,
    date: Date | None = None,
    user_id: str = Depends(get_current_user_id),
    service: CalendarViewService = Depends(_view_service),
):
    """Day, week or month grid anchored on `date` (today when omitted)."""
    if view not in VIEWS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"View must be one of: {', '.join(VIEWS)}",
        )
    try:
        grid = await service.get_view(user_id, view, date)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": grid}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    user_id: str = Depends(get_current_user_id),
    service: CalendarService = Depends(_service),
):
    """Create a new calendar event."""
    try:
        event = service.create_event(
            user_id=user_id,
            title=data.title,
            start_time=data.start_time,
            end_time=data.end_time,
            description=data.description,
            event_type=data.event_type,
            is_all_day=data.is_all_day,
            location=data.location,
        )
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": event}


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    data: EventUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CalendarService = Depends(_service),
):
    """Update an existing event."""
    try:
        event = service.update_event(user_id, event_id, data.model_dump())
    except NotFoundError as e:
        raise app_error_to_http(e, status.HTTP_404_NOT_FOUND)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": event}


@router.patch("/{event_id}/complete")
async def set_completed(
    event_id: str,
    data: CompletionUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CalendarService = Depends(_service),
):
    """Mark an event (usually a Canvas assignment) done or not done."""
    try:
        event = service.set_completed(user_id, event_id, data.completed)
    except NotFoundError as e:
        raise app_error_to_http(e, status.HTTP_404_NOT_FOUND)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": event}


@router.delete("/canvas")
async def clear_canvas_events(
    user_id: str = Depends(get_current_user_id),
    service: CalendarService = Depends(_service),
):
    """Remove every synced Canvas event."""
    try:
        count = service.clear_provider_events(user_id, CANVAS_PROVIDER)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"message": "Canvas events cleared", "deleted": count}


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CalendarService = Depends(_service),
):
    """Delete an event."""
    try:
        service.delete_event(user_id, event_id)
    except NotFoundError as e:
        raise app_error_to_http(e, status.HTTP_404_NOT_FOUND)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"message": "Event deleted"}
