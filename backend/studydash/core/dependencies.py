"""
FastAPI dependency injection functions.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from studydash.core.cache import DashboardCache
from studydash.core.database import get_supabase_client
from studydash.core.exceptions import InvalidTokenError, app_error_to_http
from studydash.core.loads import LoadTracker
from studydash.core.notifications import EventBus
from studydash.core.security import decode_access_token

# Bearer token scheme for Swagger UI
bearer_scheme = HTTPBearer()


def get_db() -> Client:
    """Dependency: get Supabase client."""
    return get_supabase_client()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """Dependency: extract and validate user_id from JWT token.

    Returns:
        str: The user's UUID as string.

    Raises:
        HTTPException 401: If token is invalid or expired.
    """
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        error = app_error_to_http(InvalidTokenError(), status.HTTP_401_UNAUTHORIZED)
        error.headers = {"WWW-Authenticate": "Bearer"}
        raise error

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token does not identify a user",
        )

    return user_id


# ── App-scoped collaborators (created in main.create_app) ──

def get_cache(request: Request) -> DashboardCache:
    return request.app.state.cache


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_load_tracker(request: Request) -> LoadTracker:
    return request.app.state.load_tracker
