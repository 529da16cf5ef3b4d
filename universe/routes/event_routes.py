"""Event API routes.

Listing is public; creating, updating and deleting require an
ORGANISATION token, and updates/deletes also require owning the event.
"""

import logging

from flask import Blueprint, g, jsonify, request

from universe.auth import Role, current_identity, requires_auth, requires_role
from universe.database import get_repositories
from universe.services import EventService
from universe.services.serializers import serialize_event
from universe.validation import event_schema, validate_json

logger = logging.getLogger(__name__)

events_bp = Blueprint("events", __name__, url_prefix="/events")


def get_event_service() -> EventService:
    return EventService(get_repositories().events)


@events_bp.route("", methods=["GET"])
def list_events():
    """List events, soonest first. ``?organiserId=`` narrows to one organiser."""
    events = get_event_service().list_events(request.args.get("organiserId"))
    return jsonify({"events": [serialize_event(e) for e in events]}), 200


@events_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id: str):
    event = get_event_service().get_event(event_id)
    return jsonify({"event": serialize_event(event)}), 200


@events_bp.route("", methods=["POST"])
@requires_auth
@requires_role(Role.ORGANISATION)
@validate_json(event_schema)
def create_event():
    event = get_event_service().create_event(current_identity(), g.validated_data)
    return jsonify({"event": serialize_event(event)}), 201


@events_bp.route("/<event_id>", methods=["PATCH"])
@requires_auth
@requires_role(Role.ORGANISATION)
@validate_json(event_schema)
def update_event(event_id: str):
    event = get_event_service().update_event(current_identity(), event_id, g.validated_data)
    return jsonify({"event": serialize_event(event)}), 200


@events_bp.route("/<event_id>", methods=["DELETE"])
@requires_auth
@requires_role(Role.ORGANISATION)
def delete_event(event_id: str):
    get_event_service().delete_event(current_identity(), event_id)
    return jsonify({"message": "Event deleted"}), 200
