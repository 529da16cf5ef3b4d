"""Event repository implementation."""

import logging
from typing import List

from sqlalchemy.orm import Session, joinedload

from universe.models import Event

from .base import BaseRepository

logger = logging.getLogger(__name__)


class EventRepository(BaseRepository[Event]):
    """Repository for Event model."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Event)

    def list_upcoming_first(self) -> List[Event]:
        """All events ordered by date, soonest first, with organisers loaded."""
        return (
            self.db.query(Event)
            .options(joinedload(Event.organiser))
            .order_by(Event.date.asc())
            .all()
        )

    def get_by_organiser(self, organiser_id: str) -> List[Event]:
        return (
            self.db.query(Event)
            .filter(Event.organiser_id == organiser_id)
            .order_by(Event.date.asc())
            .all()
        )
