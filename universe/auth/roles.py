"""Account roles and the role gate."""

import enum
from typing import Iterable, Optional

from ..errors import InsufficientPermissions, NotAuthenticated


class Role(str, enum.Enum):
    """Account role. Closed set: a new member must be handled at every check below."""

    STUDENT = "STUDENT"
    ORGANISATION = "ORGANISATION"

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the role named by ``value`` or None if it names no role."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


def role_satisfies(actual: Role, required: Role) -> bool:
    """Return True when a caller holding ``actual`` may act as ``required``."""
    if required is Role.STUDENT:
        return actual is Role.STUDENT
    if required is Role.ORGANISATION:
        return actual is Role.ORGANISATION
    raise ValueError(f"Unhandled role: {required!r}")


def owner_column_for(role: Role) -> str:
    """Name of the Post column that records ownership for ``role``."""
    if role is Role.STUDENT:
        return "student_id"
    if role is Role.ORGANISATION:
        return "organisation_id"
    raise ValueError(f"Unhandled role: {role!r}")


def enforce_role(identity, allowed: Iterable[Role]) -> None:
    """Raise unless ``identity`` holds one of the ``allowed`` roles.

    Raises:
        NotAuthenticated: no identity was established for the request
        InsufficientPermissions: the identity holds none of the roles
    """
    if identity is None:
        raise NotAuthenticated()
    if not any(role_satisfies(identity.role, required) for required in allowed):
        raise InsufficientPermissions()
