"""
API error types.

Every error carries a human-readable message and optional details; the
handlers in ``athletix.middleware`` render them as
``{"message": ..., "details": ...}``.
"""

from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError


class AthletixError(HTTPException):
    """Base class for errors raised by route handlers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code, detail=message, headers=headers)
        self.message = message
        self.details = details


class BadRequest(AthletixError):
    """Missing or invalid request field, or a self-referencing request."""
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(AthletixError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(AthletixError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AthletixError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AthletixError):
    """Uniqueness violation, e.g. duplicate email or duplicate follow."""
    status_code = status.HTTP_409_CONFLICT


class UpstreamError(AthletixError):
    """The database or auth service failed in an unexpected way."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when an IntegrityError comes from a unique or primary key constraint."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    # SQLite reports no sqlstate, only the message
    message = str(orig)
    return "UNIQUE constraint failed" in message or "PRIMARY KEY constraint failed" in message
