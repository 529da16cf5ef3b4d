"""Validation schemas for API requests using Marshmallow.

Schemas check the shape and types of JSON bodies; business rules (required
combinations, defaults, ownership) are enforced by the services. Keys keep
the camelCase wire format used by the mobile client.
"""

import logging
from functools import wraps
from typing import Callable

from flask import g, request
from marshmallow import EXCLUDE, Schema, fields
from marshmallow import ValidationError as MarshmallowValidationError

from universe.errors import ValidationError

logger = logging.getLogger(__name__)


class BaseSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(BaseSchema):
    """Schema for account registration requests."""

    email = fields.Str(allow_none=True)
    password = fields.Str(allow_none=True)
    role = fields.Str(allow_none=True)
    name = fields.Str(allow_none=True)
    username = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    evidence_image = fields.Str(data_key="evidenceImage", allow_none=True)
    evidence_image_mime_type = fields.Str(data_key="evidenceImageMimeType", allow_none=True)


class LoginSchema(BaseSchema):
    email = fields.Str(allow_none=True)
    password = fields.Str(allow_none=True)


class PasswordChangeSchema(BaseSchema):
    current_password = fields.Str(data_key="currentPassword", allow_none=True)
    new_password = fields.Str(data_key="newPassword", allow_none=True)
    confirm_password = fields.Str(data_key="confirmPassword", allow_none=True)


class ProfileImageSchema(BaseSchema):
    image = fields.Str(allow_none=True)
    image_mime_type = fields.Str(data_key="imageMimeType", allow_none=True)


class EventSchema(BaseSchema):
    """Schema for event create and partial update requests.

    Absent keys stay absent so PATCH can tell "not sent" from "cleared".
    """

    title = fields.Str(allow_none=True)
    description = fields.Str(allow_none=True)
    date = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    price = fields.Str(allow_none=True)
    eventImage = fields.Str(allow_none=True)
    eventImageMimeType = fields.Str(allow_none=True)


class PostCreateSchema(BaseSchema):
    caption = fields.Str(allow_none=True)
    image = fields.Str(allow_none=True)
    image_mime_type = fields.Str(data_key="imageMimeType", allow_none=True)


class LikeSchema(BaseSchema):
    # Type is checked by the service so a bad delta reports the same error as a missing one
    delta = fields.Raw(allow_none=True)


def validate_json(schema: Schema) -> Callable:
    """Decorator for validating JSON request data using a Marshmallow schema.

    The loaded data is stored in ``g.validated_data``.
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            json_data = request.get_json(silent=True)
            if not isinstance(json_data, dict):
                raise ValidationError("Request body must be a JSON object")

            try:
                g.validated_data = schema.load(json_data)
            except MarshmallowValidationError as err:
                logger.warning(
                    "Validation error on %s %s: %s", request.method, request.path, err.messages
                )
                raise ValidationError("Validation failed", details=err.messages) from None

            return f(*args, **kwargs)

        return decorated_function
    return decorator


register_schema = RegisterSchema()
login_schema = LoginSchema()
password_change_schema = PasswordChangeSchema()
profile_image_schema = ProfileImageSchema()
event_schema = EventSchema()
post_create_schema = PostCreateSchema()
like_schema = LikeSchema()
