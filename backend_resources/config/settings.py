"""Runtime settings for backend-resources: environment variables, Docker secrets, demo defaults."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


SECRETS_DIR = Path("/run/secrets")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Read a secret from the Docker secrets mount, else from ``env_var``.

    An empty or unreadable secret file counts as absent.

    Returns:
        The stripped secret, or None when neither source has one
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] Loaded {secret_name} from {SECRETS_DIR}")
                return secret_value
        except OSError as e:
            print(f"[settings] Failed to read {SECRETS_DIR}/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Keycloak admin API
    keycloak_url: str
    keycloak_realm: str = "ITM"
    keycloak_service_realm: str = "ITM"
    keycloak_service_client_id: str = "backend-resources"
    keycloak_service_client_secret: str = ""

    # Bearer token validation
    keycloak_issuer: str = ""
    keycloak_server_url: str = ""
    jwt_leeway_seconds: int = 5

    # Roles
    moderator_role: str = "moderator"

    # Logging
    log_level: str = "INFO"


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, demo_mode: bool = False) -> str:
    """Get environment variable or fall back to the demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        return demo_default

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    keycloak_url = _get_or_generate(
        "KEYCLOAK_URL",
        demo_default="http://127.0.0.1:8080",
        demo_mode=demo_mode,
    ).rstrip("/")
    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "ITM")
    keycloak_service_realm = os.environ.get("KEYCLOAK_SERVICE_REALM", keycloak_realm)

    keycloak_issuer = _get_or_generate(
        "KEYCLOAK_ISSUER",
        demo_default=f"{keycloak_url}/realms/{keycloak_realm}",
        demo_mode=demo_mode,
    ).rstrip("/")
    keycloak_server_url = os.environ.get("KEYCLOAK_SERVER_URL", keycloak_issuer).rstrip("/")

    keycloak_service_client_id = os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "backend-resources")
    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET",
    )
    if not keycloak_service_client_secret:
        if not demo_mode:
            raise RuntimeError(
                "KEYCLOAK_SERVICE_CLIENT_SECRET not found in /run/secrets or environment. "
                "Set DEMO_MODE=true for local development."
            )
        keycloak_service_client_secret = "demo-service-secret"
        print("[demo-mode] Using default KEYCLOAK_SERVICE_CLIENT_SECRET")

    try:
        jwt_leeway_seconds = int(os.environ.get("JWT_LEEWAY_SECONDS", "5"))
    except ValueError:
        raise RuntimeError("JWT_LEEWAY_SECONDS must be an integer")

    moderator_role = os.environ.get("MODERATOR_ROLE", "moderator").strip().lower() or "moderator"
    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; realm={keycloak_realm}; client_id={keycloak_service_client_id}")

    if demo_mode:
        print("[settings] WARNING: Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_service_realm=keycloak_service_realm,
        keycloak_service_client_id=keycloak_service_client_id,
        keycloak_service_client_secret=keycloak_service_client_secret,
        keycloak_issuer=keycloak_issuer,
        keycloak_server_url=keycloak_server_url,
        jwt_leeway_seconds=jwt_leeway_seconds,
        moderator_role=moderator_role,
        log_level=log_level,
    )
