"""
Security utilities: verification of Supabase Auth access tokens.
"""

from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError

from studydash.config import get_settings


def create_access_token(user_id: str, expires_minutes: int = 60, extra_data: dict | None = None) -> str:
    """Create a token shaped like the ones Supabase Auth issues.

    Supabase mints tokens for real sessions; this is used by tooling and tests.
    """
    settings = get_settings()

    payload = {
        "sub": str(user_id),
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
        "iat": datetime.now(timezone.utc),
    }
    if extra_data:
        payload.update(extra_data)

    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token. Returns payload or None if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return payload
    except JWTError:
        return None
