"""
Tasks feature: API routes for task management and the assignment list.
"""

from fastapi import APIRouter, Depends, Query, status
from supabase import Client

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
from studydash.features.calendar.schemas import CompletionUpdate
from studydash.features.calendar.service import CalendarViewService
from studydash.features.courses.extractor import CANVAS_PROVIDER
from studydash.features.tasks.schemas import TaskCreate, TaskStatus, TaskUpdate
from studydash.features.tasks.service import TasksService

router = APIRouter()


def _service(
    db: Client = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> TasksService:
    return TasksService(db, bus=bus)


@router.get("/")
async def list_tasks(
    status_filter: TaskStatus | None = Query(None, alias="status"),
    source_provider: str | None = None,
    user_id: str = Depends(get_current_user_id),
    service: TasksService = Depends(_service),
):
    """List tasks, highest priority first."""
    try:
        tasks = service.list_tasks(user_id, status_filter, source_provider)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": tasks}


@router.get("/assignments")
async def list_assignments(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
    cache: DashboardCache = Depends(get_cache),
    tracker: LoadTracker = Depends(get_load_tracker),
):
    """Recent Canvas assignments and tasks with due status, soonest first."""
    service = CalendarViewService(db, cache=cache, tracker=tracker)
    try:
        items = await service.get_assignments(user_id)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": items}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    service: TasksService = Depends(_service),
):
    try:
        task = service.create_task(
            user_id=user_id,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            priority_score=data.priority_score,
            course_name=data.course_name,
        )
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": task}


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    data: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    service: TasksService = Depends(_service),
):
    try:
        task = service.update_task(user_id, task_id, data.model_dump())
    except NotFoundError as e:
        raise app_error_to_http(e, status.HTTP_404_NOT_FOUND)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": task}


@router.patch("/{task_id}/complete")
async def set_completed(
    task_id: str,
    data: CompletionUpdate,
    user_id: str = Depends(get_current_user_id),
    service: TasksService = Depends(_service),
):
    try:
        task = service.set_completed(user_id, task_id, data.completed)
    except NotFoundError as e:
        raise app_error_to_http(e, status.HTTP_404_NOT_FOUND)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"data": task}


@router.delete("/canvas")
async def clear_canvas_tasks(
    user_id: str = Depends(get_current_user_id),
    service: TasksService = Depends(_service),
):
    """Remove every synced Canvas task."""
    try:
        count = service.clear_provider_tasks(user_id, CANVAS_PROVIDER)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"message": "Canvas tasks cleared", "deleted": count}


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TasksService = Depends(_service),
):
    try:
        service.delete_task(user_id, task_id)
    except NotFoundError as e:
        raise app_error_to_http(e, status.HTTP_404_NOT_FOUND)
    except DataStoreError as e:
        raise app_error_to_http(e, status.HTTP_502_BAD_GATEWAY)
    return {"message": "Task deleted"}
