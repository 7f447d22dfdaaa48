"""Keycloak Admin API client library.

Architecture:
- client.py: HTTP client with service account authentication and auto-refresh
- users.py: KeycloakUserGateway (create, fetch by id, search, delete)
- exceptions.py: Typed exceptions for error handling

Usage:
    from backend_resources.core.keycloak import create_service_account_client, KeycloakUserGateway

    client = create_service_account_client("http://keycloak:8080", "ITM", "backend-resources", "secret")
    gateway = KeycloakUserGateway(client, "ITM")
    user = gateway.fetch_by_id("00741f96-c983-4cc8-beec-750d2320d238")
"""
from .client import (
    KeycloakClient,
    create_service_account_client,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    UserNotFoundError,
    UserAlreadyExistsError,
)
from .users import KeycloakUserGateway

__all__ = [
    # Client
    "KeycloakClient",
    "create_service_account_client",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "UserNotFoundError",
    "UserAlreadyExistsError",

    # Gateway
    "KeycloakUserGateway",
]
