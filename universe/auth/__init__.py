"""Authentication and authorization module.

This module provides JWT-based authentication and role-based access
control for students and organisations.
"""

from .decorators import (
    current_identity,
    requires_any_role,
    requires_auth,
    requires_role,
)
from .roles import Role
from .tokens import IdentityClaims, JWTManager, TokenSettings

__all__ = [
    "IdentityClaims",
    "JWTManager",
    "Role",
    "TokenSettings",
    "current_identity",
    "requires_any_role",
    "requires_auth",
    "requires_role",
]
