"""backend-resources user management service.

To use the Flask app:
    from backend_resources.flask_app import create_app

To use the Keycloak gateway:
    from backend_resources.core.keycloak import KeycloakClient, KeycloakUserGateway
"""
# Note: flask_app is not imported here so that scripts only needing
# backend_resources.core.keycloak do not build the application.
