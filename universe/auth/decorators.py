"""Authentication and authorization decorators.

Provides decorators for protecting routes with bearer token authentication
and role-based access control. The verified identity is kept on ``flask.g``
as an :class:`IdentityClaims` value and read back with :func:`current_identity`.
"""

from functools import wraps
from typing import Callable, Optional

from flask import current_app, g, request

from ..errors import (
    MissingAuthorizationHeader,
    MissingToken,
    NotAuthenticated,
)
from .roles import Role, enforce_role
from .tokens import IdentityClaims, JWTManager


def get_jwt_manager() -> JWTManager:
    """Token manager configured on the current application."""
    return current_app.extensions["jwt_manager"]


def extract_token(auth_header: Optional[str]) -> str:
    """Pull the token out of an Authorization header value.

    Accepts either ``Bearer <token>`` or the raw token.
    """
    if not auth_header:
        raise MissingAuthorizationHeader()

    scheme, _, rest = auth_header.strip().partition(" ")
    if scheme.lower() == "bearer":
        token = rest.strip()
    else:
        token = auth_header.strip()

    if not token:
        raise MissingToken()
    return token


def authenticate_request() -> IdentityClaims:
    """Verify the request's bearer token and store the identity on ``g``."""
    token = extract_token(request.headers.get("Authorization"))
    identity = get_jwt_manager().decode(token)
    g.identity = identity
    return identity


def current_identity() -> IdentityClaims:
    """Identity established by :func:`requires_auth` for this request."""
    identity = g.get("identity")
    if identity is None:
        raise NotAuthenticated()
    return identity


def requires_auth(f: Callable) -> Callable:
    """Decorator that requires a valid bearer token."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        authenticate_request()
        return f(*args, **kwargs)

    return decorated_function


def requires_role(role: Role) -> Callable:
    """Decorator that requires the authenticated caller to hold ``role``.

    Must be applied beneath :func:`requires_auth`.
    """
    return requires_any_role(role)


def requires_any_role(*roles: Role) -> Callable:
    """Decorator that requires the authenticated caller to hold one of ``roles``."""

    def decorator(f: Callable) -> Callable:

        @wraps(f)
        def decorated_function(*args, **kwargs):
            enforce_role(g.get("identity"), roles)
            return f(*args, **kwargs)

        return decorated_function

    return decorator
