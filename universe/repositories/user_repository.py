"""User repository implementation.

Handles all database operations for the User model, including removal of an
account together with the content it owns.
"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from universe.models import Event, Post, User

from .base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (already normalized) email."""
        return self.db.query(User).filter(User.email == email).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def email_exists(self, email: str) -> bool:
        return self.db.query(User.id).filter(User.email == email).first() is not None

    def set_profile_image(self, user: User, image: bytes, mime_type: str) -> User:
        return self.update(user, profile_image=image, profile_image_mime_type=mime_type)

    def set_password_hash(self, user: User, hashed_password: str) -> User:
        return self.update(user, hashed_password=hashed_password)

    def delete_with_content(self, user_id: str) -> bool:
        """Delete a user, their posts and the events they organise in one transaction.

        Returns:
            True if the user existed, False otherwise
        """
        try:
            self.db.query(Post).filter(
                or_(Post.student_id == user_id, Post.organisation_id == user_id)
            ).delete(synchronize_session=False)
            self.db.query(Event).filter(Event.organiser_id == user_id).delete(
                synchronize_session=False
            )
            deleted = (
                self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if deleted:
            logger.info(f"Deleted user {user_id} with owned posts and events")
        return bool(deleted)
