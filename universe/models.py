from __future__ import annotations

import datetime
import uuid
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from .auth.passwords import hash_password, verify_password
from .auth.roles import Role

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class User(Base):
    """Account credential plus profile. Students and organisations share it."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(256), unique=True, nullable=False, index=True)
    username = Column(String(128), unique=True, nullable=True, index=True)
    name = Column(String(256), nullable=False)
    location = Column(String(256), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.STUDENT)
    profile_image = Column(LargeBinary, nullable=True)
    profile_image_mime_type = Column(String(64), nullable=True)
    evidence_image = Column(LargeBinary, nullable=True)
    evidence_image_mime_type = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    events = relationship("Event", back_populates="organiser")

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"<User id={self.id} email={self.email} role={self.role}>"

    def set_password(self, password: str, rounds: int = 12) -> None:
        """Hash and set the user's password."""
        self.hashed_password = hash_password(password, rounds)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return verify_password(password, self.hashed_password)


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=False, default="")
    date = Column(DateTime, nullable=False, index=True)
    location = Column(String(256), nullable=False)
    price = Column(String(64), nullable=False)
    organiser_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    event_image = Column(LargeBinary, nullable=True)
    event_image_mime_type = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    organiser = relationship("User", back_populates="events")

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"<Event id={self.id} title={self.title} organiser_id={self.organiser_id}>"


class Post(Base):
    """Image post owned by exactly one of a student or an organisation."""
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "(student_id IS NULL) <> (organisation_id IS NULL)",
            name="ck_posts_single_owner",
        ),
        CheckConstraint("likes >= 0", name="ck_posts_likes_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    caption = Column(Text, nullable=False)
    image = Column(LargeBinary, nullable=False)
    image_mime_type = Column(String(64), nullable=False)
    likes = Column(Integer, nullable=False, default=0)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    organisation_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    student = relationship("User", foreign_keys=[student_id])
    organisation = relationship("User", foreign_keys=[organisation_id])

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"<Post id={self.id} likes={self.likes} author_id={self.author_id}>"

    @property
    def author_id(self) -> Optional[str]:
        return self.student_id or self.organisation_id

    @property
    def author(self) -> Optional[User]:
        return self.student if self.student_id else self.organisation

    def is_owned_by(self, user_id: str) -> bool:
        return user_id is not None and user_id in (self.student_id, self.organisation_id)
