"""Gunicorn configuration for the backend-resources API.

Run with:
    gunicorn -c gunicorn.conf.py backend_resources.flask_app:app

Secrets are read by backend_resources.config.settings in each worker
(/run/secrets first, environment second); the hook below only reports
which source a worker will see.
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    from pathlib import Path

    secret_file = Path("/run/secrets") / "keycloak_service_client_secret"
    if secret_file.exists() and secret_file.is_file():
        worker.log.info("Keycloak service client secret found in /run/secrets")
        return

    if os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"):
        worker.log.info("Keycloak service client secret taken from environment")
    elif os.environ.get("DEMO_MODE", "false").lower() == "true":
        worker.log.warning("DEMO_MODE=true: using demo Keycloak service client secret")
    else:
        worker.log.error("KEYCLOAK_SERVICE_CLIENT_SECRET missing; settings will refuse to load")
