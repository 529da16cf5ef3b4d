"""Route blueprints.

Events, posts and uploads; authentication routes live in ``universe.auth.routes``.
"""

from flask import Blueprint, jsonify

from .event_routes import events_bp
from .post_routes import posts_bp
from .upload_routes import upload_bp

health_bp = Blueprint("health", __name__)


@health_bp.route("/", methods=["GET"])
def health():
    """Simple health check endpoint."""
    return jsonify({"status": "ok", "service": "UniVerse backend"}), 200


__all__ = ["events_bp", "posts_bp", "upload_bp", "health_bp"]
