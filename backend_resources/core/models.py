"""Request and response shapes for the users API."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


def _as_text(value: Any) -> str:
    """Coerce a JSON field to text; missing or non-string values become blank."""
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class UserCreateRequest:
    """Payload of ``POST /api/users``."""

    username: str
    email: str
    password: str
    first_name: str
    last_name: str

    @classmethod
    def from_dict(cls, payload: dict) -> "UserCreateRequest":
        """Build a request from the camelCase JSON body."""
        return cls(
            username=_as_text(payload.get("username")),
            email=_as_text(payload.get("email")),
            password=_as_text(payload.get("password")),
            first_name=_as_text(payload.get("firstName")),
            last_name=_as_text(payload.get("lastName")),
        )


@dataclass(frozen=True)
class UserView:
    """Read-only projection of a provider user record."""

    first_name: str
    last_name: str
    email: str
    roles: frozenset[str] = field(default_factory=frozenset)
    groups: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_record(cls, record: dict) -> "UserView":
        """Assemble a view from a Keycloak user representation.

        The record is expected to carry ``realmRoles`` and ``groups`` as
        lists of names, as filled in by the gateway.
        """
        return cls(
            first_name=record.get("firstName") or "",
            last_name=record.get("lastName") or "",
            email=record.get("email") or "",
            roles=frozenset(record.get("realmRoles") or ()),
            groups=frozenset(record.get("groups") or ()),
        )

    def to_dict(self) -> dict:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "roles": sorted(self.roles),
            "groups": sorted(self.groups),
        }


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, built from validated bearer token claims."""

    username: str
    subject: Optional[str] = None
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_claims(cls, claims: dict, roles: Iterable[str]) -> "Identity":
        """Username comes from ``preferred_username`` only; ``sub`` is never a username."""
        username = claims.get("preferred_username")
        if not isinstance(username, str):
            username = ""
        return cls(username=username.strip(), subject=claims.get("sub"), roles=frozenset(roles))
