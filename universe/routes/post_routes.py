"""Post API routes. Every route requires authentication."""

import logging

from flask import Blueprint, current_app, g, jsonify, request

from universe.auth import Role, current_identity
from universe.auth.decorators import authenticate_request
from universe.database import get_repositories
from universe.services import PostService
from universe.services.serializers import serialize_post
from universe.validation import like_schema, post_create_schema, validate_json

logger = logging.getLogger(__name__)

posts_bp = Blueprint("posts", __name__, url_prefix="/posts")


def get_post_service() -> PostService:
    return PostService(get_repositories().posts)


def post_creation_roles():
    """Roles allowed to create posts, from the POST_CREATION_ROLES setting."""
    roles = [Role.parse(name) for name in current_app.config["POST_CREATION_ROLES"]]
    return [role for role in roles if role is not None]


@posts_bp.before_request
def authenticate():
    """Authenticate every request to this blueprint except CORS preflight."""
    if request.method != "OPTIONS":
        authenticate_request()


@posts_bp.route("", methods=["GET"])
def list_posts():
    posts = get_post_service().list_posts()
    return jsonify({"posts": [serialize_post(p) for p in posts]}), 200


@posts_bp.route("/user/<user_id>", methods=["GET"])
def list_user_posts(user_id: str):
    posts = get_post_service().list_user_posts(user_id)
    return jsonify({"posts": [serialize_post(p) for p in posts]}), 200


@posts_bp.route("/<post_id>", methods=["GET"])
def get_post(post_id: str):
    post = get_post_service().get_post(post_id)
    return jsonify({"post": serialize_post(post)}), 200


@posts_bp.route("", methods=["POST"])
@validate_json(post_create_schema)
def create_post():
    data = g.validated_data
    post = get_post_service().create_post(
        current_identity(),
        data.get("caption"),
        data.get("image"),
        data.get("image_mime_type"),
        allowed_roles=post_creation_roles(),
    )
    return jsonify({"message": "Post created successfully", "post": serialize_post(post)}), 201


@posts_bp.route("/<post_id>", methods=["DELETE"])
def delete_post(post_id: str):
    get_post_service().delete_post(current_identity(), post_id)
    return jsonify({"message": "Post deleted successfully"}), 200


@posts_bp.route("/<post_id>/like", methods=["POST"])
@validate_json(like_schema)
def like_post(post_id: str):
    """Adjust a post's like count by ``delta``; the count never drops below zero."""
    post = get_post_service().update_likes(post_id, g.validated_data.get("delta"))
    return jsonify({"post": {"id": post.id, "likes": post.likes}}), 200
