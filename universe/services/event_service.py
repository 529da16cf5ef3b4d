"""Event listing and organiser-owned event management."""

import datetime
import logging
from typing import Any, Dict, List, Mapping, Optional

from universe.auth.roles import Role, enforce_role
from universe.auth.tokens import IdentityClaims
from universe.errors import Forbidden, NotFoundError, ValidationError, persistence_errors
from universe.models import Event
from universe.repositories import EventRepository

from .serializers import decode_image

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date", "location", "price")
TEXT_FIELDS = ("title", "location", "price")


def parse_event_date(value: Any) -> datetime.datetime:
    """Parse an ISO-8601 date into a naive UTC datetime."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Invalid date format")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError("Invalid date format") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed


def _image_fields(data: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Resolve the eventImage / eventImageMimeType pair.

    Returns None when neither key was sent, a dict of column values otherwise.
    """
    if "eventImage" not in data and "eventImageMimeType" not in data:
        return None
    image = data.get("eventImage")
    mime_type = data.get("eventImageMimeType")
    if bool(image) != bool(mime_type):
        raise ValidationError("eventImage and eventImageMimeType must be provided together")
    if not image:
        return {"event_image": None, "event_image_mime_type": None}
    return {
        "event_image": decode_image(image, "eventImage"),
        "event_image_mime_type": mime_type,
    }


class EventService:
    """Events are public to read and mutable only by their organiser."""

    def __init__(self, event_repo: EventRepository):
        self.event_repo = event_repo

    def list_events(self, organiser_id: Optional[str] = None) -> List[Event]:
        with persistence_errors("fetch events"):
            if organiser_id:
                return self.event_repo.get_by_organiser(organiser_id)
            return self.event_repo.list_upcoming_first()

    def get_event(self, event_id: str) -> Event:
        with persistence_errors("fetch event"):
            event = self.event_repo.get_by_id(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def create_event(self, identity: IdentityClaims, data: Mapping[str, Any]) -> Event:
        """Create an event organised by the caller.

        Raises:
            ValidationError: a required field is missing, the date does not
                parse, or only one of the image fields was sent
        """
        enforce_role(identity, (Role.ORGANISATION,))

        if any(not data.get(field) for field in REQUIRED_FIELDS):
            raise ValidationError("Missing required fields: title, date, location, price")
        date = parse_event_date(data["date"])
        image = _image_fields(data) or {}

        description = data.get("description")
        event = Event(
            title=data["title"],
            description=description if isinstance(description, str) else "",
            date=date,
            location=data["location"],
            price=data["price"],
            organiser_id=identity.id,
            **image,
        )
        with persistence_errors("create event"):
            event = self.event_repo.add(event)
        logger.info("Organiser %s created event %s", identity.id, event.id)
        return event

    def _owned_event(self, identity: IdentityClaims, event_id: str) -> Event:
        """Re-read the event and check the caller organises it."""
        enforce_role(identity, (Role.ORGANISATION,))
        event = self.get_event(event_id)
        if event.organiser_id != identity.id:
            logger.warning("User %s denied access to event %s", identity.id, event_id)
            raise Forbidden("Not authorized to modify this event")
        return event

    def update_event(self, identity: IdentityClaims, event_id: str, data: Mapping[str, Any]) -> Event:
        """Apply a partial update to an event the caller organises."""
        event = self._owned_event(identity, event_id)

        changes: Dict[str, Any] = {}
        for field in TEXT_FIELDS:
            if field in data:
                if not data[field]:
                    raise ValidationError(f"{field} must not be empty")
                changes[field] = data[field]
        if "description" in data:
            description = data["description"]
            changes["description"] = description if isinstance(description, str) else ""
        if "date" in data:
            changes["date"] = parse_event_date(data["date"])
        image = _image_fields(data)
        if image is not None:
            changes.update(image)

        if not changes:
            raise ValidationError("No fields to update")

        with persistence_errors("update event"):
            event = self.event_repo.update(event, **changes)
        logger.info("Organiser %s updated event %s", identity.id, event_id)
        return event

    def delete_event(self, identity: IdentityClaims, event_id: str) -> None:
        self._owned_event(identity, event_id)
        with persistence_errors("delete event"):
            deleted = self.event_repo.delete(event_id)
        if not deleted:
            # A concurrent delete got there first
            raise NotFoundError("Event not found")
        logger.info("Organiser %s deleted event %s", identity.id, event_id)
