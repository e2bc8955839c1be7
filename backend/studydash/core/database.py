"""
Database connections: Supabase client setup.
"""

import logging
from functools import lru_cache

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client

from studydash.config import get_settings
from studydash.core.exceptions import DataStoreError

logger = logging.getLogger(__name__)


@lru_cache
def get_supabase_client() -> Client:
    """Get the Supabase client (singleton).

    Uses the anon key; row-level security scopes every query to the
    signed-in user, and services still filter by user_id explicitly.
    """
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def run_query(query, operation: str):
    """Execute a Supabase query builder, turning client failures into DataStoreError."""
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as e:
        logger.error(f"Data store operation '{operation}' failed: {e}", exc_info=True)
        raise DataStoreError(operation, str(e)) from e
