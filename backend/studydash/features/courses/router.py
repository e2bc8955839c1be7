"""
Courses feature: API routes for the course tracking view.
"""

from fastapi import APIRouter, Depends, status
from supabase import Client

from studydash.core.cache import DashboardCache
from studydash.core.dependencies import (
    get_cache,
    get_current_user_id,
    get_db,
    get_event_bus,
    get_load_tracker,
)
from studydash.core.exceptions import DataStoreError, InvalidSettingError, app_error_to_http
from studydash.core.loads import LoadTracker
from studydash.core.notifications import EventBus
from studydash.features.courses.appearance import ICON_CATALOG, icon_categories
from studydash.features.courses.schemas import CourseColorUpdate, CourseIconUpdate, CourseOrderUpdate
from studydash.features.courses.service import CoursesService

router = APIRouter()


def _service(
    db: Client = Depends(get_db),
    cache: DashboardCache = Depends(get_cache),
    tracker: LoadTracker = Depends(get_load_tracker),
    bus: EventBus = Depends(get_event_bus),
) -> CoursesService:
    return CoursesService(db, cache=cache, tracker=tracker, bus=bus)


@router.get("/")
async def list_courses(
    user_id: str = Depends(get_current_user_id),
    service: CoursesService = Depends(_service),
):
    """Courses of the latest term with stats, colors and icons."""
    try:
        result = await service.get_courses(user_id)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": result}


@router.get("/icons")
async def list_icons():
    """Icon catalog for the course customization picker."""
    return {"data": {"categories": icon_categories(), "icons": ICON_CATALOG}}


@router.put("/order")
async def save_order(
    data: CourseOrderUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CoursesService = Depends(_service),
):
    try:
        order = service.save_order(user_id, data.order)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": {"order": order}}


@router.put("/{code}/color")
async def save_color(
    code: str,
    data: CourseColorUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CoursesService = Depends(_service),
):
    try:
        colors = service.save_color(user_id, code, data.color)
    except InvalidSettingError as e:
        raise app_error_to_http(e, status.HTTP_400_BAD_REQUEST)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": colors}


@router.put("/{code}/icon")
async def save_icon(
    code: str,
    data: CourseIconUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CoursesService = Depends(_service),
):
    try:
        icons = service.save_icon(user_id, code, data.icon)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": icons}


@router.delete("/settings")
async def reset_customizations(
    user_id: str = Depends(get_current_user_id),
    service: CoursesService = Depends(_service),
):
    """Forget saved course colors, icons and order."""
    try:
        deleted = service.reset_customizations(user_id)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"message": "Course customizations reset", "deleted": deleted}
