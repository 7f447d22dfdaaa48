"""Pytest shared fixtures: app, signed bearer tokens, in-memory identity provider."""
import os
import pathlib
import sys
import time
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import jwt
import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization

from backend_resources.api import decorators
from backend_resources.config import AppConfig
from backend_resources.flask_app import create_app
from tests.fakes import InMemoryIdentityGateway


TEST_ISSUER = "http://keycloak.test/realms/ITM"
TEST_KID = "test-key-id"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting Keycloak.

    Integration tests are marked with @pytest.mark.integration and are
    allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(*args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP call in unit test: {args[:2]}")

    monkeypatch.setattr(requests, "request", _refuse)
    monkeypatch.setattr(requests, "get", _refuse)
    monkeypatch.setattr(requests, "post", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for JWT Testing
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """Generate RSA key pair for JWT signing in tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return {
        "private_key": private_key,
        "private_pem": private_pem,
        "public_key": private_key.public_key(),
    }


class _StaticSigningKey:
    def __init__(self, key):
        self.key = key


class _StaticJWKS:
    """Stands in for PyJWKClient: always resolves to the test public key."""

    def __init__(self, public_key):
        self._public_key = public_key

    def get_signing_key_from_jwt(self, token):
        return _StaticSigningKey(self._public_key)


@pytest.fixture()
def mock_jwks(monkeypatch, rsa_key_pair):
    """Resolve every token's signing key to the test RSA public key."""
    jwks = _StaticJWKS(rsa_key_pair["public_key"])
    monkeypatch.setattr(decorators, "_jwks_client", None)
    monkeypatch.setattr(decorators, "get_jwks_client", lambda: jwks)
    return jwks


# ─────────────────────────────────────────────────────────────────────────────
# JWT Token Helpers
# ─────────────────────────────────────────────────────────────────────────────
def create_valid_jwt(
    rsa_key_pair: dict,
    username: Optional[str] = "testUser_ITM",
    roles: Optional[list[str]] = None,
    issuer: str = TEST_ISSUER,
    exp_offset: int = 3600,
    sub: str = "user-123",
) -> str:
    """Create an RS256-signed Keycloak-style access token."""
    if roles is None:
        roles = ["moderator"]

    now = int(time.time())
    payload = {
        "iss": issuer,
        "aud": "account",
        "sub": sub,
        "exp": now + exp_offset,
        "iat": now,
        "realm_access": {"roles": roles},
    }
    if username is not None:
        payload["preferred_username"] = username
    return jwt.encode(payload, rsa_key_pair["private_pem"], algorithm="RS256", headers={"kid": TEST_KID})


@pytest.fixture()
def auth_headers(rsa_key_pair, mock_jwks):
    """Build Authorization headers for a caller with the given roles."""

    def _make(username: str = "testUser_ITM", roles: Optional[list[str]] = None, **token_kwargs) -> dict:
        token = create_valid_jwt(rsa_key_pair, username=username, roles=roles, **token_kwargs)
        return {"Authorization": f"Bearer {token}"}

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Application
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def app_config():
    return AppConfig(
        demo_mode=True,
        keycloak_url="http://keycloak.test",
        keycloak_realm="ITM",
        keycloak_service_realm="ITM",
        keycloak_service_client_id="backend-resources",
        keycloak_service_client_secret="test-secret",
        keycloak_issuer=TEST_ISSUER,
        keycloak_server_url=TEST_ISSUER,
        moderator_role="moderator",
    )


@pytest.fixture()
def gateway():
    """Fresh in-memory identity provider per test."""
    return InMemoryIdentityGateway()


@pytest.fixture()
def flask_app(gateway, app_config):
    flask_app = create_app(gateway=gateway, cfg=app_config)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(flask_app, mock_jwks):
    """Flask test client backed by the in-memory gateway."""
    with flask_app.test_client() as client:
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires running Keycloak)"
    )
