"""
Error kinds surfaced to API clients

Each kind carries a fixed HTTP status code. Route handlers and guards raise
these; the handlers registered in ``porchboard.main`` render them as
``{"status": "error", "message": ...}``.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for client-facing errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(AppError):
    """Malformed or missing request fields"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class Unauthorized(AppError):
    """Missing, invalid or expired credential"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    """Role or tenant mismatch"""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFound(AppError):
    """Referenced entity is absent"""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    """Uniqueness violation (reported as 400 by convention)"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class PayloadTooLarge(AppError):
    """Upload exceeds the route's size ceiling"""
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"
