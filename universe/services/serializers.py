"""JSON representations of models and base64 image transport helpers.

Images travel as base64 strings embedded in JSON and are stored as blobs.
"""

import base64
import binascii
import datetime
from typing import Any, Dict, Optional

from universe.auth.roles import Role
from universe.errors import ValidationError
from universe.models import Event, Post, User


def encode_image(blob: Optional[bytes]) -> Optional[str]:
    if blob is None:
        return None
    return base64.b64encode(blob).decode("ascii")


def decode_image(value: str, field: str = "image") -> bytes:
    """Decode a base64 image payload, rejecting anything that is not base64."""
    try:
        data = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(f"{field} must be base64 encoded") from None
    if not data:
        raise ValidationError(f"{field} must not be empty")
    return data


def isoformat(value: Optional[datetime.datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def serialize_user(user: User) -> Dict[str, Any]:
    """Public account representation. The password hash never leaves the server."""
    data = {
        "id": user.id,
        "email": user.email,
        "username": user.username or user.name,
        "name": user.name,
        "role": Role(user.role).value,
        "createdAt": isoformat(user.created_at),
        "profileImage": encode_image(user.profile_image),
        "profileImageMimeType": user.profile_image_mime_type,
    }
    if user.role is Role.ORGANISATION:
        data["location"] = user.location
        data["evidenceImage"] = encode_image(user.evidence_image)
        data["evidenceImageMimeType"] = user.evidence_image_mime_type
    return data


def serialize_author(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username or user.name,
        "name": user.name,
        "role": Role(user.role).value,
        "profileImage": encode_image(user.profile_image),
        "profileImageMimeType": user.profile_image_mime_type,
    }


def serialize_event(event: Event) -> Dict[str, Any]:
    organiser = event.organiser
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description or "",
        "date": isoformat(event.date),
        "location": event.location,
        "price": event.price,
        "organiserId": event.organiser_id,
        "createdAt": isoformat(event.created_at),
        "eventImage": encode_image(event.event_image),
        "eventImageMimeType": event.event_image_mime_type,
        "organiser": {
            "id": organiser.id,
            "name": organiser.name,
            "location": organiser.location,
        } if organiser is not None else None,
    }


def serialize_post(post: Post) -> Dict[str, Any]:
    return {
        "id": post.id,
        "caption": post.caption,
        "image": encode_image(post.image),
        "imageMimeType": post.image_mime_type,
        "likes": post.likes,
        "studentId": post.student_id,
        "organisationId": post.organisation_id,
        "authorId": post.author_id,
        "createdAt": isoformat(post.created_at),
        "User": serialize_author(post.author),
    }
