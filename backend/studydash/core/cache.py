"""
Dashboard cache: per-user cache of store reads and derived views.

Entries are keyed by (user_id, resource) and expire through cachetools'
TTLCache. Every value written is also remembered as the last-known-good
copy so a failed reload can keep serving it.
"""

import logging
from enum import Enum
from typing import Any

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    COURSES = "courses"
    CALENDAR = "calendar"


CacheKey = tuple[str, Resource]


class DashboardCache:
    """Structured cache with explicit invalidation on mutation."""

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 512):
        self._fresh: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl_seconds)
        self._last_good: dict[CacheKey, Any] = {}
        self._max_entries = max_entries

    def get(self, user_id: str, resource: Resource) -> Any | None:
        """Fresh value or None when missing, expired or invalidated."""
        return self._fresh.get((user_id, resource))

    def get_stale(self, user_id: str, resource: Resource) -> Any | None:
        """Last value ever set for the key, even if expired or invalidated."""
        return self._last_good.get((user_id, resource))

    def set(self, user_id: str, resource: Resource, value: Any) -> None:
        key = (user_id, resource)
        self._fresh[key] = value
        if key not in self._last_good and len(self._last_good) >= self._max_entries:
            # Drop the oldest fallback copy (dicts keep insertion order)
            self._last_good.pop(next(iter(self._last_good)))
        self._last_good[key] = value

    def invalidate(self, user_id: str, resource: Resource | None = None) -> int:
        """Expire one resource, or every resource of the user when None.

        Last-known-good copies are kept. Returns the number of fresh entries dropped.
        """
        if resource is not None:
            keys = [(user_id, resource)]
        else:
            keys = [k for k in list(self._fresh.keys()) if k[0] == user_id]

        dropped = 0
        for key in keys:
            if self._fresh.pop(key, None) is not None:
                dropped += 1
        if dropped:
            logger.debug(f"Invalidated {dropped} cache entries for user {user_id[:8]}")
        return dropped

    def __len__(self) -> int:
        return len(self._fresh)
