"""Unit tests for KeycloakUserGateway against a mocked KeycloakClient."""
from unittest.mock import MagicMock

import pytest

from backend_resources.core import gateway
from backend_resources.core.keycloak.client import KeycloakClient
from backend_resources.core.keycloak.exceptions import (
    KeycloakAPIError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from backend_resources.core.keycloak.users import KeycloakUserGateway

USERS_PATH = "/admin/realms/ITM/users"
USER_ID = "00741f96-c983-4cc8-beec-750d2320d238"


def _response(json_body=None, headers=None, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = headers or {}
    resp.json.return_value = json_body
    return resp


@pytest.fixture
def kc_client(mocker):
    return mocker.MagicMock(spec=KeycloakClient)


@pytest.fixture
def user_gateway(kc_client):
    return KeycloakUserGateway(kc_client, "ITM")


class TestCreate:
    def test_posts_enabled_user_with_permanent_password(self, user_gateway, kc_client):
        kc_client.post.return_value = _response(
            status_code=201, headers={"Location": f"http://kc{USERS_PATH}/{USER_ID}"}
        )

        user_id = user_gateway.create("alice", "a@example.com", "secret1", "A", "B")

        assert user_id == USER_ID
        path = kc_client.post.call_args.args[0]
        payload = kc_client.post.call_args.kwargs["json"]
        assert path == USERS_PATH
        assert payload["username"] == "alice"
        assert payload["firstName"] == "A"
        assert payload["lastName"] == "B"
        assert payload["enabled"] is True
        assert payload["credentials"] == [{"type": "password", "value": "secret1", "temporary": False}]

    def test_without_location_falls_back_to_search(self, user_gateway, kc_client):
        kc_client.post.return_value = _response(status_code=201)
        kc_client.get.return_value = _response([{"id": USER_ID, "username": "alice"}])

        assert user_gateway.create("alice", "a@example.com", "secret1", "A", "B") == USER_ID
        kc_client.get.assert_called_once_with(USERS_PATH, params={"username": "alice", "exact": "true"})

    def test_without_location_or_match_raises(self, user_gateway, kc_client):
        kc_client.post.return_value = _response(status_code=201)
        kc_client.get.return_value = _response([])

        with pytest.raises(KeycloakAPIError):
            user_gateway.create("alice", "a@example.com", "secret1", "A", "B")

    def test_conflict_raises_already_exists(self, user_gateway, kc_client):
        kc_client.post.side_effect = KeycloakAPIError(409, "User exists with same username", USERS_PATH)

        with pytest.raises(UserAlreadyExistsError):
            user_gateway.create("alice", "a@example.com", "secret1", "A", "B")

    def test_other_api_error_propagates(self, user_gateway, kc_client):
        kc_client.post.side_effect = KeycloakAPIError(500, "boom", USERS_PATH)

        with pytest.raises(KeycloakAPIError) as exc:
            user_gateway.create("alice", "a@example.com", "secret1", "A", "B")

        assert exc.value.status_code == 500


class TestFetchById:
    def test_merges_role_and_group_names(self, user_gateway, kc_client):
        responses = {
            f"{USERS_PATH}/{USER_ID}": _response({"id": USER_ID, "firstName": "A", "email": "a@example.com"}),
            f"{USERS_PATH}/{USER_ID}/role-mappings/realm": _response(
                [{"id": "r1", "name": "ROLE_USER"}, {"id": "r2", "name": "offline_access"}]
            ),
            f"{USERS_PATH}/{USER_ID}/groups": _response([{"id": "g1", "name": "GROUP_A", "path": "/GROUP_A"}]),
        }
        kc_client.get.side_effect = lambda path, **kwargs: responses[path]

        user = user_gateway.fetch_by_id(USER_ID)

        assert user["firstName"] == "A"
        assert user["realmRoles"] == ["ROLE_USER", "offline_access"]
        assert user["groups"] == ["GROUP_A"]

    def test_empty_mappings_give_empty_lists(self, user_gateway, kc_client):
        responses = iter([_response({"id": USER_ID}), _response(None), _response([])])
        kc_client.get.side_effect = lambda path, **kwargs: next(responses)

        user = user_gateway.fetch_by_id(USER_ID)

        assert user["realmRoles"] == []
        assert user["groups"] == []

    def test_missing_user_raises_not_found(self, user_gateway, kc_client):
        kc_client.get.side_effect = KeycloakAPIError(404, "User not found", f"{USERS_PATH}/{USER_ID}")

        with pytest.raises(UserNotFoundError):
            user_gateway.fetch_by_id(USER_ID)

    def test_server_error_propagates(self, user_gateway, kc_client):
        kc_client.get.side_effect = KeycloakAPIError(503, "unavailable", f"{USERS_PATH}/{USER_ID}")

        with pytest.raises(KeycloakAPIError):
            user_gateway.fetch_by_id(USER_ID)


class TestSearchAndDelete:
    def test_search_keeps_exact_matches_only(self, user_gateway, kc_client):
        kc_client.get.return_value = _response(
            [{"id": "1", "username": "alice"}, {"id": "2", "username": "alice2"}]
        )

        matches = user_gateway.search_by_username("Alice")

        assert [u["id"] for u in matches] == ["1"]

    def test_search_with_no_results(self, user_gateway, kc_client):
        kc_client.get.return_value = _response([])

        assert user_gateway.search_by_username("ghost") == []

    def test_delete_calls_user_path(self, user_gateway, kc_client):
        user_gateway.delete_by_id(USER_ID)

        kc_client.delete.assert_called_once_with(f"{USERS_PATH}/{USER_ID}")

    def test_delete_missing_user_raises_not_found(self, user_gateway, kc_client):
        kc_client.delete.side_effect = KeycloakAPIError(404, "User not found", f"{USERS_PATH}/{USER_ID}")

        with pytest.raises(UserNotFoundError):
            user_gateway.delete_by_id(USER_ID)


def test_keycloak_failures_are_gateway_failures():
    not_found = UserNotFoundError("gone", user_id=USER_ID)
    taken = UserAlreadyExistsError("taken", username="alice")

    assert isinstance(not_found, gateway.UserNotFoundError)
    assert isinstance(taken, gateway.UserAlreadyExistsError)
    assert not_found.user_id == USER_ID
    assert taken.username == "alice"
