"""Typed failures raised by the service layer and the authorization gate.

Each failure carries the HTTP status the façade answers with, so the
translation in ``backend_resources.api.errors`` stays a lookup.
"""
from __future__ import annotations
from typing import Optional


class BackendResourcesError(Exception):
    """Base exception for all domain failures."""

    status = 500
    title = "Internal Server Error"

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        if status is not None:
            self.status = status
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body."""
        return {"error": self.title, "message": self.message}


class ValidationError(BackendResourcesError):
    """Client input is malformed.

    Attributes:
        errors: field name -> human-readable violation message
    """

    status = 400
    title = "Bad Request"

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))

    def to_dict(self) -> dict:
        return dict(self.errors)


class UnauthenticatedError(BackendResourcesError):
    """No valid identity is attached to the request."""

    status = 401
    title = "Unauthorized"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(BackendResourcesError):
    """Identity is authenticated but lacks the required role."""

    status = 403
    title = "Forbidden"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class NotFoundError(BackendResourcesError):
    status = 404
    title = "Not Found"


class ConflictError(BackendResourcesError):
    """Resource already exists (duplicate username)."""

    status = 409
    title = "Conflict"


class UnknownError(BackendResourcesError):
    """Provider or infrastructure fault; never retried internally."""

    status = 500
    title = "Internal Server Error"
