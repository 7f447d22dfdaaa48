"""
Flask decorators for authentication and authorization.

This module validates OAuth 2.0 Bearer Tokens (RFC 6750) issued by Keycloak
and enforces the role set each route declares.

Security:
- RSA-SHA256 signature verification via JWKS (RFC 7517)
- Expiration, not-before, issuer validation (RFC 7519)
- JWKS caching for performance (1-hour refresh)
"""

import logging
from functools import wraps
from typing import Callable, Dict, Any, Iterable, Optional

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    ExpiredSignatureError,
    InvalidIssuerError,
    InvalidSignatureError,
    DecodeError,
    PyJWKClientError,
    PyJWTError,
)
from flask import request, current_app, g

from backend_resources.core import rbac
from backend_resources.core.errors import UnauthenticatedError
from backend_resources.core.models import Identity

logger = logging.getLogger(__name__)

# Global JWKS client (cached singleton)
_jwks_client: Optional[PyJWKClient] = None


class TokenValidationError(Exception):
    """Exception raised when JWT token validation fails."""
    pass


def get_jwks_client() -> PyJWKClient:
    """
    Get cached JWKS client (singleton pattern).

    Keys are fetched from the realm's certs endpoint and selected by the
    ``kid`` of the JWT header.

    Returns:
        PyJWKClient: Configured client for the Keycloak realm
    """
    global _jwks_client

    if _jwks_client is None:
        cfg = current_app.config["APP_CONFIG"]
        jwks_url = f"{cfg.keycloak_server_url}/protocol/openid-connect/certs"

        logger.info(f"Initializing JWKS client for: {jwks_url}")

        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
            lifespan=3600,
            headers={"User-Agent": "backend-resources/1.0"},
        )

    return _jwks_client


def validate_jwt_token(token: str) -> Dict[str, Any]:
    """
    Verify a Keycloak access token and return its claims.

    The signature must be RS256 under a key of the realm's JWKS, ``iss`` must
    equal the configured issuer, and ``exp``/``iat`` must be present. Clock
    skew up to ``jwt_leeway_seconds`` is tolerated.

    Raises:
        TokenValidationError: Any check failed; the message names which
    """
    cfg = current_app.config["APP_CONFIG"]

    try:
        signing_key = get_jwks_client().get_signing_key_from_jwt(token)

        # Audience is not checked: Keycloak access tokens carry aud=["account"]
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=cfg.keycloak_issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_nbf": True,
                "verify_iss": True,
                "verify_aud": False,
                "require": ["exp", "iat"],
            },
            leeway=cfg.jwt_leeway_seconds,
        )
    except ExpiredSignatureError:
        raise TokenValidationError("Token expired (exp claim)")
    except InvalidIssuerError as e:
        raise TokenValidationError(f"Invalid issuer (token from wrong Keycloak realm): {e}")
    except InvalidSignatureError:
        raise TokenValidationError("Invalid signature (token tampered or wrong key)")
    except DecodeError as e:
        raise TokenValidationError(f"Token decode error (malformed JWT): {e}")
    except (PyJWKClientError, PyJWTError) as e:
        raise TokenValidationError(f"Token validation failed: {e}")

    logger.debug(f"JWT validated for subject: {claims.get('sub')}")
    return claims


def authenticate_request() -> Identity:
    """Build the caller identity from the Authorization header.

    Raises:
        UnauthenticatedError: Header missing, not a bearer token, or token invalid
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header:
        raise UnauthenticatedError("Authorization header required. Use 'Authorization: Bearer <token>'")

    if not auth_header.startswith("Bearer "):
        logger.warning("Request with invalid Authorization format on %s", request.path)
        raise UnauthenticatedError("Invalid Authorization header format. Expected 'Bearer <token>'")

    token = auth_header[7:].strip()
    if not token:
        raise UnauthenticatedError("Bearer token is empty")

    try:
        claims = validate_jwt_token(token)
    except TokenValidationError as e:
        logger.warning("JWT validation failed on %s: %s", request.path, e)
        raise UnauthenticatedError(str(e)) from e

    identity = Identity.from_claims(claims, rbac.collect_roles(claims))
    if not identity.username:
        raise UnauthenticatedError("Token carries no username claim")

    g.identity = identity
    return identity


def _guard(required_roles: Callable[[], Iterable[str]]):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            identity = authenticate_request()
            rbac.authorize(identity, required_roles())
            return fn(*args, **kwargs)

        return wrapper
    return decorator


def require_roles(*roles: str):
    """
    Decorator requiring a valid bearer token holding at least one of ``roles``.

    With no roles, any authenticated caller passes. The check runs before the
    route body, so a rejected request has no side effects.

    Raises:
        UnauthenticatedError (401): Missing or invalid token
        ForbiddenError (403): None of the roles held

    Example:
        @bp.route("/api/reports", methods=["GET"])
        @require_roles("auditor")
        def list_reports():
            ...
    """
    return _guard(lambda: roles)


def require_moderator():
    """Decorator requiring the configured moderator role."""
    return _guard(lambda: [current_app.config["APP_CONFIG"].moderator_role])
