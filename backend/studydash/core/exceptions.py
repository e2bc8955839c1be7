"""
Custom exception classes for unified error handling.
"""

from fastapi import HTTPException


class AppBaseError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class DataStoreError(AppBaseError):
    """Raised when a Supabase query fails (API error, network error, timeout)."""
    def __init__(self, operation: str, original_error: str):
        super().__init__(
            message=f"Data store operation '{operation}' failed",
            detail=original_error,
        )


class NotFoundError(AppBaseError):
    """Raised when a row does not exist or belongs to another user."""
    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found",
            detail=f"No {resource.lower()} with id '{resource_id}'.",
        )


class InvalidSettingError(AppBaseError):
    """Raised when a user edit (color, icon, order) is rejected."""
    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message=message, detail=detail)


class InvalidTokenError(AppBaseError):
    """Raised when JWT token is invalid or expired."""
    def __init__(self):
        super().__init__(
            message="Invalid or expired token",
            detail="Please sign in again.",
        )


# ── Utility: convert to HTTPException ────────────────────

def app_error_to_http(error: AppBaseError, status_code: int = 400) -> HTTPException:
    """Convert an AppBaseError to an HTTPException with consistent JSON body."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
    )
