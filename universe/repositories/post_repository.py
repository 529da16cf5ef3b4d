"""Post repository implementation."""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from universe.models import Post

from .base import BaseRepository

logger = logging.getLogger(__name__)


class PostRepository(BaseRepository[Post]):
    """Repository for Post model."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Post)

    def _with_authors(self):
        return self.db.query(Post).options(
            joinedload(Post.student), joinedload(Post.organisation)
        )

    def list_newest_first(self) -> List[Post]:
        return self._with_authors().order_by(Post.created_at.desc()).all()

    def get_by_author(self, user_id: str) -> List[Post]:
        """Posts owned by ``user_id`` through either owner column, newest first."""
        return (
            self._with_authors()
            .filter(or_(Post.student_id == user_id, Post.organisation_id == user_id))
            .order_by(Post.created_at.desc())
            .all()
        )

    def set_likes(self, post_id: str, likes: int) -> Optional[Post]:
        """Overwrite the like count. Returns None if the post no longer exists."""
        updated = (
            self.db.query(Post)
            .filter(Post.id == post_id)
            .update({Post.likes: likes}, synchronize_session=False)
        )
        self.db.commit()
        if not updated:
            return None
        return (
            self.db.query(Post)
            .populate_existing()
            .filter(Post.id == post_id)
            .first()
        )
