"""Liveness and readiness checks (no authentication)."""
from flask import Blueprint, current_app

bp = Blueprint("health", __name__)

TEXT_PLAIN = {"Content-Type": "text/plain"}


@bp.route("/health")
def health_check():
    return ("ok", 200, TEXT_PLAIN)


@bp.route("/ready")
def readiness_check():
    """Ready once the user service is wired; Keycloak itself is not contacted."""
    if "user_service" not in current_app.extensions:
        return ("user service not configured", 503, TEXT_PLAIN)
    return ("ready", 200, TEXT_PLAIN)
