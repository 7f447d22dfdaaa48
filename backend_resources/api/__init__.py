"""HTTP layer: blueprints, auth decorators and error handlers."""
