"""Input validation for user creation requests."""
from __future__ import annotations
import re

from .models import UserCreateRequest

USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 5

_ATOM = r"[\w!#$%&'*+/=?`{|}~^-]+"
EMAIL_PATTERN = re.compile(
    rf"^{_ATOM}(?:\.{_ATOM})*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{{2,63}}$"
)

BLANK_MESSAGE = "must not be blank"


def _is_blank(value: str) -> bool:
    return not value or not value.strip()


def validate_username(username: str) -> str | None:
    """Return the violation message for a username, or None when valid."""
    if _is_blank(username):
        return "Username should not be blank"
    if len(username) > USERNAME_MAX_LENGTH:
        return f"Username should be between 1 and {USERNAME_MAX_LENGTH} characters long"
    return None


def validate_email(email: str) -> str | None:
    """Return the violation message for an email address, or None when valid."""
    if _is_blank(email):
        return "Email should not be blank"
    if not EMAIL_PATTERN.match(email):
        return "Email should be valid"
    return None


def validate_password(password: str) -> str | None:
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password should be greater than {PASSWORD_MIN_LENGTH - 1} characters long"
    return None


def validate_name(name: str) -> str | None:
    if _is_blank(name):
        return BLANK_MESSAGE
    return None


def validate_user_request(req: UserCreateRequest) -> dict[str, str]:
    """Collect every violation of a user creation request.

    Args:
        req: Request to check

    Returns:
        Mapping of JSON field name to message; empty when the request is valid
    """
    checks = (
        ("username", validate_username(req.username)),
        ("email", validate_email(req.email)),
        ("password", validate_password(req.password)),
        ("firstName", validate_name(req.first_name)),
        ("lastName", validate_name(req.last_name)),
    )
    return {field: message for field, message in checks if message}
