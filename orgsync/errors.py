"""
Structured error classes for the API surface.

Each error carries the HTTP status it maps to. Routes raise these and
main.py renders them as {"error": message}.
"""

from typing import Optional

from fastapi import status


class OrgSyncError(Exception):
    """Base exception for orgsync errors."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON response."""
        return {"error": self.message}


class ValidationError(OrgSyncError):
    """Malformed request shape."""
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(OrgSyncError):
    """Missing or invalid credentials."""
    http_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class AuthorizationError(OrgSyncError):
    """Valid identity, insufficient permission."""
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(OrgSyncError):
    """Resource absent."""
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class TransientPersistenceError(OrgSyncError):
    """
    Datastore call failed.

    Logged and swallowed for webhook callers; surfaced as 500 to
    interactive API callers.
    """
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database error"
