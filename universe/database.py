"""Database engine setup and request-scoped session injection.

Provides the SQLAlchemy engine factory used by the app factory, and the
per-request session and repository instances used by routes and services.
"""

from typing import Optional

from flask import current_app, g
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from universe.repositories import EventRepository, PostRepository, UserRepository
import logging

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with settings suited to the database backend."""
    if database_url.startswith('postgresql'):
        return create_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=echo
        )

    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        # Single shared connection so every session sees the same in-memory DB
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )

    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith('sqlite') else {},
        echo=echo
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db_session() -> Session:
    """Session bound to the current request, opened on first use."""
    if "db_session" not in g:
        g.db_session = current_app.extensions["db_session_factory"]()
    return g.db_session


def close_db_session(exc: Optional[BaseException] = None) -> None:
    session = g.pop("db_session", None)
    if session is not None:
        if exc is not None:
            session.rollback()
        session.close()


class RepositoryContainer:
    """Container for all repository instances."""

    def __init__(self, db: Session):
        """Initialize repository container.

        Args:
            db: Database session
        """
        self.db = db
        self._user_repo = None
        self._event_repo = None
        self._post_repo = None

    @property
    def users(self) -> UserRepository:
        """Get user repository."""
        if self._user_repo is None:
            self._user_repo = UserRepository(self.db)
        return self._user_repo

    @property
    def events(self) -> EventRepository:
        """Get event repository."""
        if self._event_repo is None:
            self._event_repo = EventRepository(self.db)
        return self._event_repo

    @property
    def posts(self) -> PostRepository:
        """Get post repository."""
        if self._post_repo is None:
            self._post_repo = PostRepository(self.db)
        return self._post_repo


def get_repositories() -> RepositoryContainer:
    """Repository container bound to the current request's session."""
    return RepositoryContainer(get_db_session())
