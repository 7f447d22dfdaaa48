"""Keycloak Admin API transport.

One ``KeycloakClient`` per process: it holds the service-account credentials,
fetches a client-credentials token on first use, renews it shortly before it
expires, and turns HTTP error statuses into ``KeycloakAPIError``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import requests

from .exceptions import KeycloakAPIError

REQUEST_TIMEOUT = 5
# Renew this many seconds before Keycloak's expires_in
TOKEN_EXPIRY_MARGIN = 10

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceAccount:
    realm: str
    client_id: str
    client_secret: str


class KeycloakClient:
    """Authenticated HTTP access to ``{base_url}/admin/realms/...``.

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        client.configure_service_account("ITM", "backend-resources", "secret")
        users = client.get("/admin/realms/ITM/users", params={"username": "alice"}).json()
    """

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self._account: Optional[ServiceAccount] = None
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None

    def configure_service_account(self, auth_realm: str, client_id: str, client_secret: str) -> None:
        """Remember the credentials; no request is made until the first API call."""
        self._account = ServiceAccount(auth_realm, client_id, client_secret)
        self._token = None
        self._token_expires_at = None

    def get(self, path: str, params: Optional[dict] = None, **kwargs) -> requests.Response:
        return self._send("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Optional[dict] = None, **kwargs) -> requests.Response:
        return self._send("POST", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> requests.Response:
        return self._send("DELETE", path, **kwargs)

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        """Issue an authenticated request.

        Raises:
            KeycloakAPIError: No credentials configured, or Keycloak answered >= 400
        """
        token = self._current_token()
        headers = {**kwargs.pop("headers", {}), "Authorization": f"Bearer {token}"}
        resp = requests.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=REQUEST_TIMEOUT,
            **kwargs,
        )
        if resp.status_code >= 400:
            raise KeycloakAPIError(resp.status_code, resp.text, resp.url)
        return resp

    def _current_token(self) -> str:
        if self._account is None:
            raise KeycloakAPIError(401, "No service account configured", self.base_url)
        expired = self._token_expires_at is None or datetime.now() >= self._token_expires_at
        if not self._token or expired:
            self._renew_token()
        return self._token

    def _renew_token(self) -> None:
        account = self._account
        token_url = f"{self.base_url}/realms/{account.realm}/protocol/openid-connect/token"
        resp = requests.post(
            token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": account.client_id,
                "client_secret": account.client_secret,
            },
            timeout=REQUEST_TIMEOUT,
        )
        if resp.status_code != 200:
            logger.error("Token request for client '%s' failed: HTTP %s", account.client_id, resp.status_code)
            raise KeycloakAPIError(resp.status_code, resp.text, token_url)

        body = resp.json()
        lifetime = int(body.get("expires_in", 60))
        self._token = body["access_token"]
        self._token_expires_at = datetime.now() + timedelta(seconds=max(lifetime - TOKEN_EXPIRY_MARGIN, 0))
        logger.debug("Service account token for '%s' valid for %ss", account.client_id, lifetime)


def create_service_account_client(
    kc_url: str,
    auth_realm: str,
    client_id: str,
    client_secret: str,
) -> KeycloakClient:
    """Build a client that authenticates lazily with client credentials."""
    kc = KeycloakClient(kc_url)
    kc.configure_service_account(auth_realm, client_id, client_secret)
    return kc
