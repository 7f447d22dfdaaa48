"""Identity provider capability consumed by the user service.

Production code talks to Keycloak through
``backend_resources.core.keycloak.KeycloakUserGateway``; tests substitute an
in-memory implementation of the same protocol.
"""
from __future__ import annotations
from typing import Optional, Protocol


class IdentityGatewayError(Exception):
    """Base class for failures any gateway implementation may raise."""


class UserNotFoundError(IdentityGatewayError):
    """No user with the given id exists."""

    def __init__(self, message: str, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message)


class UserAlreadyExistsError(IdentityGatewayError):
    """The username (or email) is already taken."""

    def __init__(self, message: str, username: Optional[str] = None):
        self.username = username
        super().__init__(message)


class IdentityGateway(Protocol):
    """Admin operations on the identity provider's user store."""

    def create(self, username: str, email: str, password: str, first_name: str, last_name: str) -> str:
        """Create an enabled user with a permanent password and return its id.

        Raises:
            UserAlreadyExistsError: If the username is taken in the realm
        """
        ...

    def fetch_by_id(self, user_id: str) -> dict:
        """Return the user representation with ``realmRoles`` and ``groups`` names.

        Raises:
            UserNotFoundError: If no user has this id
        """
        ...

    def search_by_username(self, username: str) -> list[dict]:
        """Return users whose username matches exactly (zero or one)."""
        ...

    def delete_by_id(self, user_id: str) -> None:
        """Remove a user.

        Raises:
            UserNotFoundError: If no user has this id
        """
        ...
