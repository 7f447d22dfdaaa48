"""Core Business Logic Module

This module provides the business logic for user management, independent of
the Flask HTTP layer.

Module Structure:
    - keycloak/         : Keycloak Admin API client and IdentityGateway implementation
    - gateway.py        : IdentityGateway protocol
    - user_service.py   : UserService (create, get by id, identity echo)
    - rbac.py           : Role collection and the authorization gate
    - validators.py     : UserCreateRequest validation
    - models.py         : UserCreateRequest, UserView, Identity
    - errors.py         : Typed failures mapped to HTTP statuses by the API layer

Usage Pattern:
    Import explicitly when needed:
        from backend_resources.core.user_service import UserService
        from backend_resources.core.rbac import authorize
        from backend_resources.core.validators import validate_user_request
"""
