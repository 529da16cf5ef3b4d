"""Service layer implementations.

This module provides business logic services that orchestrate repository operations
and implement the authorization rules.
"""

from .auth_service import AuthService
from .event_service import EventService
from .post_service import PostService

__all__ = [
    'AuthService',
    'EventService',
    'PostService'
]
