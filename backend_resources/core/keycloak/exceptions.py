"""Failures raised by the Keycloak Admin API layer."""
from __future__ import annotations

from backend_resources.core import gateway


class KeycloakError(Exception):
    """Base class; the user service maps anything unhandled to a 500."""


class KeycloakAPIError(KeycloakError):
    """Admin API answered with an HTTP error status.

    Attributes:
        status_code: HTTP status returned by Keycloak
        message: Response body, usually Keycloak's errorMessage JSON
        endpoint: URL or path that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class UserNotFoundError(KeycloakError, gateway.UserNotFoundError):
    """Keycloak answered 404 for a user id."""


class UserAlreadyExistsError(KeycloakError, gateway.UserAlreadyExistsError):
    """Keycloak refused a create with 409 (username or email taken)."""
