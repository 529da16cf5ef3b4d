"""Authentication and account service.

Handles registration, login, profile lookups and account management for
students and organisations.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError

from universe.auth.passwords import MAX_PASSWORD_BYTES, hash_password
from universe.auth.roles import Role
from universe.auth.tokens import IdentityClaims, JWTManager
from universe.errors import (
    DuplicateAccount,
    InvalidPassword,
    MissingCredentials,
    NotFoundError,
    ValidationError,
    persistence_errors,
)
from universe.models import User
from universe.repositories import UserRepository

from .serializers import decode_image

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAMES = {
    Role.STUDENT: "Student",
    Role.ORGANISATION: "Organisation",
}


def normalize_email(email: Optional[str]) -> str:
    """Trim and lowercase an email address."""
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def _clean(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _evidence_fields(role: Role, image: Optional[str], mime_type: Optional[str]) -> dict:
    """Column values for an organisation's optional evidence image."""
    if not image and not mime_type:
        return {}
    if role is not Role.ORGANISATION:
        raise ValidationError("Only organisations can provide an evidence image")
    if not image or not mime_type:
        raise ValidationError("evidenceImage and evidenceImageMimeType must be provided together")
    return {
        "evidence_image": decode_image(image, "evidenceImage"),
        "evidence_image_mime_type": mime_type,
    }


def _check_password_length(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


class AuthService:
    """Authentication and account management service."""

    def __init__(self, user_repo: UserRepository, jwt_manager: JWTManager, bcrypt_rounds: int = 12):
        """Initialize auth service.

        Args:
            user_repo: User repository instance
            jwt_manager: Token manager used to sign session tokens
            bcrypt_rounds: bcrypt cost factor for new password hashes
        """
        self.user_repo = user_repo
        self.jwt_manager = jwt_manager
        self.bcrypt_rounds = bcrypt_rounds

    def issue_token(self, user: User) -> str:
        return self.jwt_manager.issue(user.id, Role(user.role), email=user.email)

    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        role=None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        location: Optional[str] = None,
        evidence_image: Optional[str] = None,
        evidence_image_mime_type: Optional[str] = None,
    ) -> Tuple[User, str]:
        """Create an account and sign a token for it.

        An absent or unknown role falls back to STUDENT and a blank name to
        a per-role default. Organisations may attach a base64 evidence
        image; students cannot.

        Returns:
            Tuple of (created user, session token)

        Raises:
            MissingCredentials: email or password empty
            ValidationError: a student sent an evidence image, or only half of one
            DuplicateAccount: the email (or username) is already registered
        """
        email = normalize_email(email)
        if not email or not isinstance(password, str) or not password:
            raise MissingCredentials()
        _check_password_length(password)

        role = Role.parse(role) or Role.STUDENT
        username = _clean(username)
        evidence = _evidence_fields(role, evidence_image, evidence_image_mime_type)

        with persistence_errors("register account"):
            if self.user_repo.email_exists(email):
                logger.info("Registration rejected, email already exists: %s", email)
                raise DuplicateAccount()
            if username and self.user_repo.get_by_username(username):
                raise DuplicateAccount("Username already exists")

            user = User(
                email=email,
                username=username,
                name=_clean(name) or DEFAULT_DISPLAY_NAMES[role],
                location=_clean(location) if role is Role.ORGANISATION else None,
                role=role,
                **evidence,
            )
            user.set_password(password, self.bcrypt_rounds)
            try:
                user = self.user_repo.add(user)
            except IntegrityError:
                # Lost a race with a concurrent registration of the same email
                raise DuplicateAccount() from None

        token = self.issue_token(user)
        logger.info("Registered %s account %s", role.value, user.id)
        return user, token

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """Check credentials and sign a token. Never mutates the account.

        Raises:
            MissingCredentials: email or password empty
            NotFoundError: no account with that email
            InvalidPassword: password does not match the stored hash
        """
        email = normalize_email(email)
        if not email or not isinstance(password, str) or not password:
            raise MissingCredentials()

        with persistence_errors("log in"):
            user = self.user_repo.get_by_email(email)

        if user is None:
            logger.info("Login failed, unknown email: %s", email)
            raise NotFoundError("User not found")

        if not user.verify_password(password):
            logger.info("Login failed, wrong password for user %s", user.id)
            raise InvalidPassword()

        logger.info("User %s logged in", user.id)
        return user, self.issue_token(user)

    def get_user(self, user_id: str) -> User:
        with persistence_errors("fetch user"):
            user = self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile_image(self, identity: IdentityClaims, image: Optional[str],
                             mime_type: Optional[str]) -> User:
        """Replace the caller's profile image with a base64 payload."""
        if not image or not mime_type:
            raise ValidationError("Missing image or imageMimeType")
        return self.store_profile_image(identity, decode_image(image), mime_type)

    def store_profile_image(self, identity: IdentityClaims, data: bytes, mime_type: str) -> User:
        user = self.get_user(identity.id)
        with persistence_errors("update profile image"):
            return self.user_repo.set_profile_image(user, data, mime_type)

    def change_password(self, identity: IdentityClaims, current_password: Optional[str],
                        new_password: Optional[str], confirm_password: Optional[str]) -> None:
        """Replace the caller's password after re-validating the current one.

        Raises:
            ValidationError: a field is missing or the new passwords differ
            NotFoundError: the account no longer exists
            InvalidPassword: the current password is wrong
        """
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("Missing password fields")
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")
        _check_password_length(new_password)

        user = self.get_user(identity.id)
        if not user.verify_password(current_password):
            raise InvalidPassword("Current password is incorrect")

        with persistence_errors("update password"):
            self.user_repo.set_password_hash(user, hash_password(new_password, self.bcrypt_rounds))
        logger.info("Password changed for user %s", user.id)

    def delete_account(self, identity: IdentityClaims) -> None:
        """Delete the caller's account along with the posts and events it owns."""
        with persistence_errors("delete account"):
            deleted = self.user_repo.delete_with_content(identity.id)
        if not deleted:
            raise NotFoundError("User not found")
        logger.info("Deleted account %s", identity.id)
