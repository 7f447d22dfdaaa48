"""Role-Based Access Control helpers."""
from __future__ import annotations
from typing import Iterable, Optional

from flask import g, has_request_context

from .errors import ForbiddenError, UnauthenticatedError
from .models import Identity

ROLE_PREFIX = "role_"


def collect_roles(*sources) -> list[str]:
    """Collect all roles from realm_access and resource_access of token claims."""
    roles = []
    for source in sources:
        if not isinstance(source, dict):
            continue
        realm_access = source.get("realm_access")
        if isinstance(realm_access, dict):
            roles.extend(r for r in (realm_access.get("roles") or []) if r not in roles)
        resource_access = source.get("resource_access")
        if isinstance(resource_access, dict):
            for client_access in resource_access.values():
                if not isinstance(client_access, dict):
                    continue
                roles.extend(r for r in (client_access.get("roles") or []) if r not in roles)
    return roles


def normalize_role(role: str) -> str:
    """Lowercase a role name and drop a Spring-style ``ROLE_`` prefix."""
    role = role.strip().lower()
    if role.startswith(ROLE_PREFIX):
        role = role[len(ROLE_PREFIX):]
    return role


def has_any_role(roles: Iterable[str], required_roles: Iterable[str]) -> bool:
    held = {normalize_role(r) for r in roles if r}
    return any(normalize_role(r) in held for r in required_roles)


def authorize(identity: Optional[Identity], required_roles: Iterable[str] = ()) -> Identity:
    """Gate an operation on its declared role set.

    Args:
        identity: Authenticated caller, or None when the request carries none
        required_roles: Roles of which the caller needs at least one; empty
            means any authenticated caller passes

    Returns:
        The identity, for chaining

    Raises:
        UnauthenticatedError: No identity
        ForbiddenError: Identity holds none of the required roles
    """
    if identity is None:
        raise UnauthenticatedError()

    required = [r for r in required_roles if r]
    if required and not has_any_role(identity.roles, required):
        raise ForbiddenError(f"Required role: {', '.join(required)}")
    return identity


def current_identity() -> Optional[Identity]:
    """Get the identity attached to the current request by the auth decorator."""
    if not has_request_context():
        return None
    return g.get("identity")
