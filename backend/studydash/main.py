"""
Studydash - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in studydash/features/ has its own router, service, and schemas.
  The dashboard cache, event bus and load tracker are created once per app
  and reached through request.app.state.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studydash.config import get_settings
from studydash.core.cache import DashboardCache
from studydash.core.loads import LoadTracker
from studydash.core.notifications import EventBus, Notification

# ── Feature Routers ──────────────────────────────────────
from studydash.features.calendar.router import router as calendar_router
from studydash.features.courses.router import router as courses_router
from studydash.features.tasks.router import router as tasks_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings = get_settings()
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} starting...")
    logger.info(f"Supabase: {settings.SUPABASE_URL[:40]}...")
    logger.info(f"Default timezone: {settings.DEFAULT_TIMEZONE}, default term: {settings.DEFAULT_TERM}")
    yield
    logger.info("Shutting down...")


def wire_invalidation(bus: EventBus, cache: DashboardCache, tracker: LoadTracker):
    """Every data change drops the user's cached views and supersedes in-flight loads."""

    def on_change(note: Notification) -> None:
        tracker.supersede(note.user_id)
        dropped = cache.invalidate(note.user_id)
        logger.debug(f"{note.kind.value} for {note.user_id[:8]}: dropped {dropped} cache entries")

    return bus.subscribe_all(on_change)


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Student dashboard: courses, calendar and assignments",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # ── Shared state ─────────────────────────────────────
    app.state.cache = DashboardCache(settings.CACHE_TTL_SECONDS, settings.CACHE_MAX_ENTRIES)
    app.state.event_bus = EventBus()
    app.state.load_tracker = LoadTracker()
    wire_invalidation(app.state.event_bus, app.state.cache, app.state.load_tracker)

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Register Feature Routers ─────────────────────────
    app.include_router(courses_router, prefix="/api/courses", tags=["Courses"])
    app.include_router(calendar_router, prefix="/api/calendar", tags=["Calendar"])
    app.include_router(tasks_router, prefix="/api/tasks", tags=["Tasks"])

    # ── Health Check ─────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check():
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
