"""Repository pattern implementation.

This module provides data access layer abstractions following the Repository pattern
for clean separation of concerns and improved testability.
"""

from .base import BaseRepository
from .user_repository import UserRepository
from .event_repository import EventRepository
from .post_repository import PostRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'EventRepository',
    'PostRepository'
]
