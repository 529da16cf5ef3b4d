"""Multipart profile image upload."""

import logging

from flask import Blueprint, current_app, jsonify, request

from universe.auth import current_identity, requires_auth
from universe.errors import ValidationError
from universe.auth.routes import get_auth_service

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__)


@upload_bp.route("/upload-image", methods=["POST"])
@requires_auth
def upload_image():
    """Store a multipart ``image`` file as the caller's profile image.

    Only ``image/*`` files up to MAX_UPLOAD_BYTES are accepted.
    """
    file = request.files.get("image")
    if file is None or not file.filename:
        raise ValidationError("No image file provided")

    mimetype = file.mimetype or ""
    if not mimetype.startswith("image/"):
        raise ValidationError("Only image files are allowed")

    max_bytes = current_app.config["MAX_UPLOAD_BYTES"]
    data = file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationError(f"Image must be at most {max_bytes} bytes")
    if not data:
        raise ValidationError("No image file provided")

    get_auth_service().store_profile_image(current_identity(), data, mimetype)
    logger.info("User %s uploaded a profile image (%d bytes)", current_identity().id, len(data))

    return jsonify({
        "message": "Image uploaded successfully",
        "image": {
            "filename": file.filename,
            "mimetype": mimetype,
            "size": len(data),
        },
    }), 200
