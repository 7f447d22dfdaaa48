"""Error handlers for the application."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from backend_resources.core.errors import BackendResourcesError, UnauthenticatedError


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(BackendResourcesError)
    def handle_domain_error(error: BackendResourcesError):
        """Translate typed failures to status + JSON body."""
        if error.status >= 500:
            app.logger.error(f"Request failed: {error}", exc_info=error)
        response = jsonify(error.to_dict())
        response.status_code = error.status
        if isinstance(error, UnauthenticatedError):
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """Render routing and protocol errors (404, 405, ...) as JSON."""
        response = jsonify({"error": error.name, "message": error.description})
        response.status_code = error.code or 500
        return response

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Traceback goes to the log only; the body stays generic
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
