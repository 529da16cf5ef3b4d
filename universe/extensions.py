"""Flask extension instances shared across blueprints."""

from flask import current_app, g
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


def rate_limit_key_func() -> str:
    """Rate limit per authenticated user if known, otherwise per client IP."""
    identity = g.get("identity")
    if identity is not None:
        return f"user:{identity.id}"
    return f"ip:{get_remote_address()}"


def auth_rate_limit() -> str:
    return current_app.config["AUTH_RATE_LIMIT"]


limiter = Limiter(key_func=rate_limit_key_func, default_limits=[])
