"""Authentication API blueprint.

Provides REST API endpoints for registration, login and account management.
"""

import logging

from flask import Blueprint, current_app, g, jsonify

from ..database import get_repositories
from ..extensions import auth_rate_limit, limiter
from ..services import AuthService
from ..services.serializers import serialize_user
from ..validation import (
    login_schema,
    password_change_schema,
    profile_image_schema,
    register_schema,
    validate_json,
)
from .decorators import current_identity, get_jwt_manager, requires_auth

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")


def get_auth_service() -> AuthService:
    """Get authentication service instance."""
    return AuthService(
        get_repositories().users,
        get_jwt_manager(),
        bcrypt_rounds=current_app.config["BCRYPT_ROUNDS"],
    )


@bp.route("/register", methods=["POST"])
@limiter.limit(auth_rate_limit)
@validate_json(register_schema)
def register():
    """Register a new account and return a session token."""
    data = g.validated_data
    user, token = get_auth_service().register(
        email=data.get("email"),
        password=data.get("password"),
        role=data.get("role"),
        name=data.get("name"),
        username=data.get("username"),
        location=data.get("location"),
        evidence_image=data.get("evidence_image"),
        evidence_image_mime_type=data.get("evidence_image_mime_type"),
    )
    return jsonify({"message": "User created", "token": token, "user": serialize_user(user)}), 201


@bp.route("/login", methods=["POST"])
@limiter.limit(auth_rate_limit)
@validate_json(login_schema)
def login():
    """Authenticate with email and password and return a session token."""
    data = g.validated_data
    user, token = get_auth_service().login(data.get("email"), data.get("password"))
    return jsonify({"token": token, "user": serialize_user(user)}), 200


@bp.route("/me", methods=["GET"])
@requires_auth
def me():
    """Get the authenticated user's account."""
    user = get_auth_service().get_user(current_identity().id)
    return jsonify({"user": serialize_user(user)}), 200


@bp.route("/me", methods=["DELETE"])
@requires_auth
def delete_me():
    """Delete the authenticated user's account and everything it owns."""
    get_auth_service().delete_account(current_identity())
    return jsonify({"message": "Account deleted"}), 200


@bp.route("/user/<user_id>", methods=["GET"])
@requires_auth
def get_user_profile(user_id: str):
    """Get another user's public profile."""
    user = get_auth_service().get_user(user_id)
    return jsonify({"user": serialize_user(user)}), 200


@bp.route("/profile-image", methods=["PUT"])
@requires_auth
@validate_json(profile_image_schema)
def update_profile_image():
    data = g.validated_data
    user = get_auth_service().update_profile_image(
        current_identity(), data.get("image"), data.get("image_mime_type")
    )
    return jsonify({"user": serialize_user(user)}), 200


@bp.route("/password", methods=["PUT"])
@requires_auth
@validate_json(password_change_schema)
def change_password():
    """Change password after re-validating the current one."""
    data = g.validated_data
    get_auth_service().change_password(
        current_identity(),
        data.get("current_password"),
        data.get("new_password"),
        data.get("confirm_password"),
    )
    return jsonify({"message": "Password updated"}), 200
