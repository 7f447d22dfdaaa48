"""Keycloak user operations behind the IdentityGateway protocol."""
from __future__ import annotations
import logging

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, UserAlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)


class KeycloakUserGateway:
    """IdentityGateway backed by the Keycloak Admin REST API."""

    def __init__(self, client: KeycloakClient, realm: str):
        """Initialize the gateway.

        Args:
            client: Keycloak client configured with a service account
            realm: Realm holding the managed users
        """
        self.client = client
        self.realm = realm

    @property
    def _users_path(self) -> str:
        return f"/admin/realms/{self.realm}/users"

    def create(self, username: str, email: str, password: str, first_name: str, last_name: str) -> str:
        """Create an enabled user with a permanent password.

        Args:
            username: Username (unique in realm)
            email: Email address
            password: Initial password (not temporary)
            first_name: First name
            last_name: Last name

        Returns:
            Keycloak id of the new user

        Raises:
            UserAlreadyExistsError: Keycloak answered 409
            KeycloakAPIError: Any other HTTP error
        """
        payload = {
            "username": username,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "enabled": True,
            "credentials": [{"type": "password", "value": password, "temporary": False}],
        }
        try:
            resp = self.client.post(self._users_path, json=payload)
        except KeycloakAPIError as exc:
            if exc.status_code == 409:
                raise UserAlreadyExistsError(
                    f"User '{username}' already exists in realm '{self.realm}'", username=username
                ) from exc
            raise

        # Keycloak returns the new resource URL in Location: .../users/{id}
        location = resp.headers.get("Location", "")
        user_id = location.rstrip("/").rsplit("/", 1)[-1] if location else ""
        if not user_id:
            matches = self.search_by_username(username)
            if not matches:
                raise KeycloakAPIError(resp.status_code, "User created but not found", self._users_path)
            user_id = matches[0]["id"]

        logger.info("User '%s' created in realm '%s' (id=%s)", username, self.realm, user_id)
        return user_id

    def fetch_by_id(self, user_id: str) -> dict:
        """Return the user representation with realm role and group names.

        Raises:
            UserNotFoundError: Keycloak answered 404
            KeycloakAPIError: Any other HTTP error
        """
        path = f"{self._users_path}/{user_id}"
        try:
            user = self.client.get(path).json()
            role_mappings = self.client.get(f"{path}/role-mappings/realm").json() or []
            groups = self.client.get(f"{path}/groups").json() or []
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(
                    f"User with id '{user_id}' not found in realm '{self.realm}'", user_id=user_id
                ) from exc
            raise

        user["realmRoles"] = [role["name"] for role in role_mappings if role.get("name")]
        user["groups"] = [group["name"] for group in groups if group.get("name")]
        return user

    def search_by_username(self, username: str) -> list[dict]:
        """Return the users that exactly match the username."""
        resp = self.client.get(self._users_path, params={"username": username, "exact": "true"})
        return [user for user in resp.json() or [] if user.get("username") == username.lower()]

    def delete_by_id(self, user_id: str) -> None:
        """Remove a user from the realm.

        Raises:
            UserNotFoundError: Keycloak answered 404
        """
        try:
            self.client.delete(f"{self._users_path}/{user_id}")
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(
                    f"User with id '{user_id}' not found in realm '{self.realm}'", user_id=user_id
                ) from exc
            raise
        logger.info("User %s deleted from realm '%s'", user_id, self.realm)
