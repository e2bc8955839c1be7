"""
Application configuration using Pydantic Settings.
All config is loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "studydash"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"  # comma-separated

    # ── Supabase ─────────────────────────────────────────
    SUPABASE_URL: str
    SUPABASE_KEY: str  # anon/public key
    SUPABASE_JWT_SECRET: str  # verifies access tokens issued by Supabase Auth

    # ── Security ─────────────────────────────────────────
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # ── Calendar ─────────────────────────────────────────
    DEFAULT_TIMEZONE: str = "America/New_York"  # used when the profile has none
    ASSIGNMENT_LOOKBACK_DAYS: int = 7  # hide assignments overdue for longer

    # ── Courses ──────────────────────────────────────────
    DEFAULT_TERM: str = "2025FA"  # term for course-name tasks when no event carries one

    # ── Dashboard cache ──────────────────────────────────
    CACHE_TTL_SECONDS: int = 300
    CACHE_MAX_ENTRIES: int = 512

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (singleton)."""
    return Settings()
