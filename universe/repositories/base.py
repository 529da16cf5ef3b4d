"""Base repository implementation.

Provides common database operations and patterns for all repository classes.
"""

from abc import ABC
from typing import TypeVar, Generic, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)

# Generic type for model classes
ModelType = TypeVar('ModelType')


class BaseRepository(Generic[ModelType], ABC):
    """Base repository class with common CRUD operations."""

    def __init__(self, db_session: Session, model_class: type):
        """Initialize repository with database session and model class.

        Args:
            db_session: SQLAlchemy database session
            model_class: SQLAlchemy model class
        """
        self.db = db_session
        self.model_class = model_class

    def add(self, instance: ModelType) -> ModelType:
        """Persist a new model instance.

        Args:
            instance: Transient model instance

        Returns:
            The persisted instance, refreshed from the database

        Raises:
            IntegrityError: If database constraints are violated
        """
        try:
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
            logger.info(f"Created {self.model_class.__name__} with id {instance.id}")
            return instance
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to create {self.model_class.__name__}: {e}")
            raise

    def create(self, **kwargs) -> ModelType:
        """Create a new record from field values."""
        return self.add(self.model_class(**kwargs))

    def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: Record ID

        Returns:
            Model instance if found, None otherwise
        """
        if not id:
            return None
        return self.db.query(self.model_class).filter(self.model_class.id == id).first()

    def update(self, instance: ModelType, **kwargs) -> ModelType:
        """Apply field values to an instance and commit.

        Raises:
            IntegrityError: If database constraints are violated
        """
        try:
            for field, value in kwargs.items():
                if hasattr(instance, field):
                    setattr(instance, field, value)

            self.db.commit()
            self.db.refresh(instance)
            logger.info(f"Updated {self.model_class.__name__} with id {instance.id}")
            return instance
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to update {self.model_class.__name__} {instance.id}: {e}")
            raise

    def delete(self, id: str) -> bool:
        """Delete a record.

        Args:
            id: Record ID

        Returns:
            True if deleted, False if the record was already gone
        """
        deleted = (
            self.db.query(self.model_class)
            .filter(self.model_class.id == id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info(f"Deleted {self.model_class.__name__} with id {id}")
        return bool(deleted)
