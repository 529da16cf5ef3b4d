"""Validation module for API input validation.

Provides Marshmallow schemas for all API endpoints.
"""

from .schemas import (
    RegisterSchema, LoginSchema, PasswordChangeSchema,
    ProfileImageSchema, EventSchema, PostCreateSchema, LikeSchema,
    register_schema, login_schema, password_change_schema,
    profile_image_schema, event_schema, post_create_schema, like_schema,
    validate_json
)

__all__ = [
    'RegisterSchema', 'LoginSchema', 'PasswordChangeSchema',
    'ProfileImageSchema', 'EventSchema', 'PostCreateSchema', 'LikeSchema',
    'register_schema', 'login_schema', 'password_change_schema',
    'profile_image_schema', 'event_schema', 'post_create_schema', 'like_schema',
    'validate_json'
]
