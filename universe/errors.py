"""Application error taxonomy.

Every error carries the HTTP status and the message returned to the client.
Handlers registered by :func:`register_error_handlers` turn them into JSON
responses of the form ``{"error": message}``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class UniverseError(Exception):
    """Base class for errors reported to API clients."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(UniverseError):
    status_code = 400
    message = "Invalid request"


class MissingCredentials(ValidationError):
    message = "Missing email or password"


class ConflictError(UniverseError):
    status_code = 400
    message = "Resource already exists"


class DuplicateAccount(ConflictError):
    message = "Email already exists"


class AuthenticationError(UniverseError):
    status_code = 401
    message = "Authentication required"


class MissingAuthorizationHeader(AuthenticationError):
    message = "Missing authorization header"


class MissingToken(AuthenticationError):
    message = "Missing token"


class TokenExpired(AuthenticationError):
    message = "Token expired"


class NotAuthenticated(AuthenticationError):
    message = "Not authenticated"


class InvalidPassword(AuthenticationError):
    message = "Invalid password"


class InvalidToken(AuthenticationError):
    # Tampered or malformed tokens are 403 so clients can tell them from expiry.
    status_code = 403
    message = "Invalid token"


class AuthorizationError(UniverseError):
    status_code = 403
    message = "Forbidden"


class InsufficientPermissions(AuthorizationError):
    message = "Insufficient permissions"


class Forbidden(AuthorizationError):
    message = "Forbidden"


class NotFoundError(UniverseError):
    status_code = 404
    message = "Not found"


class ServerError(UniverseError):
    status_code = 500
    message = "Server error"

    def __init__(self, operation: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to {operation}")
        self.operation = operation


class ServerMisconfigured(ServerError):
    def __init__(self, setting: str):
        super().__init__("sign tokens", "Server misconfigured")
        self.setting = setting


@contextmanager
def persistence_errors(operation: str) -> Iterator[None]:
    """Translate database failures into a generic :class:`ServerError`.

    Full detail is logged here; the client only sees the operation name.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("Database error during '%s': %s", operation, e)
        raise ServerError(operation) from e


def register_error_handlers(app: Flask) -> None:
    """Install JSON error handlers on the application."""

    @app.errorhandler(UniverseError)
    def handle_universe_error(error: UniverseError):
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unhandled error: %s", error)
        return jsonify({"error": "Internal server error"}), 500
