"""Flask application factory and bootstrap.

Builds the users API: settings, logging, identity provider gateway,
blueprints, error handlers and the correlation-id middleware.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask, request
from werkzeug.middleware.proxy_fix import ProxyFix

from backend_resources.config import AppConfig, load_settings
from backend_resources.core.gateway import IdentityGateway
from backend_resources.core.keycloak import KeycloakUserGateway, create_service_account_client
from backend_resources.core.user_service import UserService


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(gateway: Optional[IdentityGateway] = None, cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        gateway: Identity provider implementation; defaults to the Keycloak
            Admin API gateway built from settings
        cfg: Settings; defaults to load_settings()
    """
    cfg = cfg or load_settings()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.json.sort_keys = False

    # Trust X-Forwarded-* headers from the reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    if gateway is None:
        gateway = _build_keycloak_gateway(cfg)
    app.extensions["user_service"] = UserService(gateway)

    # Register blueprints
    from backend_resources.api import health, errors, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    _register_middleware(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    app.logger.info(f"[flask_app] Mode={mode_label}; realm={cfg.keycloak_realm}")
    if cfg.demo_mode:
        app.logger.warning("[flask_app] Demo mode active - do not deploy with demo credentials")

    return app


def _build_keycloak_gateway(cfg: AppConfig) -> KeycloakUserGateway:
    client = create_service_account_client(
        cfg.keycloak_url,
        cfg.keycloak_service_realm,
        cfg.keycloak_service_client_id,
        cfg.keycloak_service_client_secret,
    )
    return KeycloakUserGateway(client, cfg.keycloak_realm)


def _register_middleware(app: Flask):
    """Register after_request middleware."""

    @app.after_request
    def add_correlation_id(response):
        """Echo the correlation ID for tracing."""
        correlation_id = request.headers.get("X-Correlation-Id")
        if correlation_id:
            response.headers["X-Correlation-Id"] = correlation_id
        return response


# ─────────────────────────────────────────────────────────────────────────────
# Application Instance (for Gunicorn)
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
