"""Remove users left behind by integration tests or manual checks.

The HTTP API has no delete; this CLI talks to the Keycloak Admin API
directly through the same gateway the service uses.

Examples:
    python scripts/cleanup_users.py delete --username username_
    python scripts/cleanup_users.py delete --id 00741f96-c983-4cc8-beec-750d2320d238
    python scripts/cleanup_users.py find --username username_
"""
from __future__ import annotations
import argparse
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend_resources.core.keycloak import (
    KeycloakUserGateway,
    create_service_account_client,
)
from backend_resources.core.gateway import UserNotFoundError
from backend_resources.core.keycloak.exceptions import KeycloakAPIError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keycloak test user cleanup")
    parser.add_argument("--kc-url", default=os.environ.get("KEYCLOAK_URL", "http://localhost:8080"))
    parser.add_argument("--realm", default=os.environ.get("KEYCLOAK_REALM", "ITM"))
    parser.add_argument("--auth-realm", default=os.environ.get("KEYCLOAK_SERVICE_REALM"))
    parser.add_argument("--svc-client-id", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "backend-resources"))
    parser.add_argument("--svc-client-secret", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"))

    sub = parser.add_subparsers(dest="cmd")

    sd = sub.add_parser("delete")
    target = sd.add_mutually_exclusive_group(required=True)
    target.add_argument("--username")
    target.add_argument("--id", dest="user_id")

    sf = sub.add_parser("find")
    sf.add_argument("--username", required=True)

    return parser


def delete_users(gateway: KeycloakUserGateway, username: str | None = None, user_id: str | None = None) -> int:
    """Delete one user by id, or every exact username match.

    Returns:
        Number of deleted users
    """
    if user_id:
        gateway.delete_by_id(user_id)
        print(f"[cleanup] Deleted user id={user_id}", file=sys.stderr)
        return 1

    deleted = 0
    for user in gateway.search_by_username(username):
        gateway.delete_by_id(user["id"])
        print(f"[cleanup] Deleted '{user.get('username')}' (id={user['id']})", file=sys.stderr)
        deleted += 1
    if not deleted:
        print(f"[cleanup] No user named '{username}'", file=sys.stderr)
    return deleted


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 2

    if not args.svc_client_secret:
        print("[cleanup] KEYCLOAK_SERVICE_CLIENT_SECRET or --svc-client-secret is required", file=sys.stderr)
        return 2

    client = create_service_account_client(
        args.kc_url,
        args.auth_realm or args.realm,
        args.svc_client_id,
        args.svc_client_secret,
    )
    gateway = KeycloakUserGateway(client, args.realm)

    try:
        if args.cmd == "delete":
            delete_users(gateway, username=args.username, user_id=args.user_id)
        elif args.cmd == "find":
            for user in gateway.search_by_username(args.username):
                print(user["id"])
    except (UserNotFoundError, KeycloakAPIError) as e:
        print(f"[cleanup] Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
