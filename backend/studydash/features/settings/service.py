"""
Settings feature: per-user key-value settings stored in user_settings.

Each row is (user_id, settings_type) → settings_data (arbitrary JSON).
"""

import logging

from supabase import Client

from studydash.core.database import run_query
from studydash.core.exceptions import DataStoreError

logger = logging.getLogger(__name__)

COURSE_COLORS = "course_colors"    # {"PSY-100": "#f59e0b"}
COURSE_ICONS = "course_icons"      # {"PSY-100": "brain"}
COURSE_ORDER = "course_order"      # {"order": ["MATH-101", "PSY-100"]}

COURSE_SETTING_TYPES = (COURSE_COLORS, COURSE_ICONS, COURSE_ORDER)


def string_map(data, settings_type: str) -> dict[str, str]:
    """Code -> value map from a settings row. Malformed rows read as empty."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed {settings_type}: expected an object")
        return {}
    return {str(k): v for k, v in data.items() if isinstance(v, str) and v}


class SettingsService:
    """Reads and writes user_settings rows and the profile timezone."""

    def __init__(self, db: Client):
        self.db = db

    def get(self, user_id: str, settings_type: str) -> dict | None:
        result = run_query(
            self.db.table("user_settings")
            .select("settings_data")
            .eq("user_id", user_id)
            .eq("settings_type", settings_type),
            f"get {settings_type}",
        )
        if not result.data:
            return None
        return result.data[0].get("settings_data")

    def get_many(self, user_id: str, settings_types: tuple[str, ...]) -> dict[str, dict | None]:
        """Several settings types in one query. Missing types map to None."""
        result = run_query(
            self.db.table("user_settings")
            .select("settings_type, settings_data")
            .eq("user_id", user_id)
            .in_("settings_type", list(settings_types)),
            "get settings",
        )
        found = {row["settings_type"]: row.get("settings_data") for row in result.data or []}
        return {t: found.get(t) for t in settings_types}

    def upsert(self, user_id: str, settings_type: str, data: dict) -> dict:
        result = run_query(
            self.db.table("user_settings").upsert(
                {
                    "user_id": user_id,
                    "settings_type": settings_type,
                    "settings_data": data,
                },
                on_conflict="user_id,settings_type",
            ),
            f"save {settings_type}",
        )
        return result.data[0] if result.data else {}

    def delete(self, user_id: str, settings_types: tuple[str, ...]) -> int:
        result = run_query(
            self.db.table("user_settings")
            .delete()
            .eq("user_id", user_id)
            .in_("settings_type", list(settings_types)),
            "delete settings",
        )
        return len(result.data) if result.data else 0

    def get_timezone(self, user_id: str) -> str | None:
        """IANA timezone name from the user's profile, if set.

        A failed lookup is not fatal: callers fall back to the default zone.
        """
        try:
            result = run_query(
                self.db.table("profiles").select("timezone").eq("user_id", user_id),
                "get timezone",
            )
        except DataStoreError:
            return None
        if not result.data:
            return None
        return result.data[0].get("timezone")
