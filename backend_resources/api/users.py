"""Users REST API.

Routes:
    POST /api/users          create a user (moderator)
    GET  /api/users/hello    echo the caller's username (any authenticated caller)
    GET  /api/users/<id>     fetch a user by id (moderator)

All business logic lives in ``backend_resources.core.user_service``; failures
raised there are rendered by the handlers in ``api.errors``.
"""
from __future__ import annotations
import logging

from flask import Blueprint, current_app, jsonify, request

from backend_resources.api.decorators import require_moderator, require_roles
from backend_resources.core.errors import ValidationError
from backend_resources.core.models import UserCreateRequest
from backend_resources.core.rbac import current_identity
from backend_resources.core.user_service import UserService

bp = Blueprint("users", __name__, url_prefix="/api/users")

logger = logging.getLogger(__name__)


def _service() -> UserService:
    return current_app.extensions["user_service"]


@bp.route("", methods=["POST"])
@require_moderator()
def create_user():
    """Create a user from a JSON UserCreateRequest."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError({"body": "Request body must be a JSON object"})

    user_id = _service().create_user(UserCreateRequest.from_dict(payload))
    logger.info("User '%s' created by '%s'", payload.get("username"), current_identity().username)
    return jsonify({"id": user_id}), 200


@bp.route("/hello", methods=["GET"])
@require_roles()
def hello():
    """Return the authenticated caller's username as a JSON string."""
    return jsonify(_service().current_identity_name(current_identity()))


@bp.route("/<user_id>", methods=["GET"])
@require_moderator()
def get_user(user_id: str):
    """Return the UserView of a user id."""
    view = _service().get_user_by_id(user_id)
    return jsonify(view.to_dict())
