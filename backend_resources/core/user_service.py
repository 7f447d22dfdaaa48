"""
User Service Layer

Orchestrates validation and identity provider calls for the users API, and
maps provider outcomes to the typed failures in ``core.errors``.

Architecture:
    /api/users ──> user_service.py ──> IdentityGateway ──> Keycloak

Every call is stateless: nothing read from the provider is kept between
requests, and username uniqueness is left to the provider.
"""

from __future__ import annotations
import logging
import uuid
from typing import Optional

import requests

from .errors import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    UnknownError,
    ValidationError,
)
from .gateway import IdentityGateway, IdentityGatewayError, UserAlreadyExistsError, UserNotFoundError
from .keycloak.exceptions import KeycloakError
from .models import Identity, UserCreateRequest, UserView
from .validators import validate_user_request

logger = logging.getLogger(__name__)

# Failures of the provider that surface as UnknownError
PROVIDER_ERRORS = (IdentityGatewayError, KeycloakError, requests.RequestException)


class UserService:
    """Create and read users in the identity provider."""

    def __init__(self, gateway: IdentityGateway):
        self.gateway = gateway

    def create_user(self, req: UserCreateRequest) -> str:
        """Create a user after validating the request.

        Args:
            req: User creation request

        Returns:
            Provider id of the created user

        Raises:
            ValidationError: Request violates field constraints (gateway not called)
            ConflictError: Username already exists in the provider
            UnknownError: Any other provider failure
        """
        violations = validate_user_request(req)
        if violations:
            raise ValidationError(violations)

        try:
            user_id = self.gateway.create(
                req.username,
                req.email,
                req.password,
                req.first_name,
                req.last_name,
            )
        except UserAlreadyExistsError as exc:
            logger.info("Rejected duplicate username '%s'", req.username)
            raise ConflictError(f"User with username '{req.username}' already exists") from exc
        except PROVIDER_ERRORS as exc:
            logger.error("Failed to create user '%s': %s", req.username, exc, exc_info=True)
            raise UnknownError(f"Failed to create user: {exc}") from exc

        return user_id

    def get_user_by_id(self, user_id: str) -> UserView:
        """Retrieve a user by provider id.

        Args:
            user_id: User id (UUID string)

        Returns:
            UserView built from the provider record

        Raises:
            ValidationError: user_id is not a UUID
            NotFoundError: No user has this id
            UnknownError: Any other provider failure
        """
        try:
            normalized_id = str(uuid.UUID(str(user_id)))
        except ValueError as exc:
            raise ValidationError({"id": f"Invalid user id '{user_id}': must be a UUID"}) from exc

        try:
            record = self.gateway.fetch_by_id(normalized_id)
        except UserNotFoundError as exc:
            raise NotFoundError(f"User with id '{normalized_id}' not found") from exc
        except PROVIDER_ERRORS as exc:
            logger.error("Failed to fetch user %s: %s", normalized_id, exc, exc_info=True)
            raise UnknownError(f"Failed to fetch user: {exc}") from exc

        return UserView.from_record(record)

    def current_identity_name(self, identity: Optional[Identity]) -> str:
        """Return the username of the authenticated caller.

        Raises:
            UnauthenticatedError: No identity is attached to the request
        """
        if identity is None or not identity.username:
            raise UnauthenticatedError()
        return identity.username
