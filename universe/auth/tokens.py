"""JWT token issuance and verification.

Tokens are self-contained: verification checks the signature and expiry only
and never consults the user store, so an issued token stays valid for its
whole lifetime even if the account changes afterwards.
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import jwt

from ..errors import InvalidToken, ServerMisconfigured, TokenExpired
from .roles import Role

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class TokenSettings:
    """Signing configuration handed to :class:`JWTManager`."""

    secret_key: Optional[str]
    algorithm: str = "HS256"
    lifetime: datetime.timedelta = datetime.timedelta(days=7)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenSettings":
        return cls(
            secret_key=config.get("JWT_SECRET") or None,
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            lifetime=datetime.timedelta(days=config.get("JWT_EXPIRE_DAYS", 7)),
        )


@dataclass(frozen=True)
class IdentityClaims:
    """Decoded payload of a verified token."""

    id: str
    role: Role
    expires_at: datetime.datetime
    email: Optional[str] = None


class JWTManager:
    """Issue and verify signed bearer tokens."""

    def __init__(self, settings: TokenSettings, clock: Optional[Clock] = None):
        self.settings = settings
        self.clock = clock or utc_now

    def _secret(self) -> str:
        if not self.settings.secret_key:
            logger.critical("JWT_SECRET is not configured; cannot sign or verify tokens")
            raise ServerMisconfigured("JWT_SECRET")
        return self.settings.secret_key

    def issue(self, user_id: str, role: Role, email: Optional[str] = None) -> str:
        """Sign a token carrying ``{id, role, email?}`` that expires after the configured lifetime."""
        secret = self._secret()
        now = self.clock()
        expire = now + self.settings.lifetime

        payload = {
            "id": str(user_id),
            "role": Role(role).value,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        if email:
            payload["email"] = email

        return jwt.encode(payload, secret, algorithm=self.settings.algorithm)

    def decode(self, token: str) -> IdentityClaims:
        """Verify ``token`` and return its claims.

        Raises:
            TokenExpired: the signature is valid but the clock is at or past ``exp``
            InvalidToken: bad signature, malformed token or unexpected claims
        """
        secret = self._secret()
        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.settings.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["id", "role", "exp"],
                },
            )
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", e)
            raise InvalidToken() from None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidToken()
        if self.clock().timestamp() >= exp:
            raise TokenExpired()

        role = Role.parse(payload.get("role"))
        user_id = payload.get("id")
        if role is None or not isinstance(user_id, str) or not user_id:
            raise InvalidToken()

        email = payload.get("email")
        return IdentityClaims(
            id=user_id,
            role=role,
            email=email if isinstance(email, str) else None,
            expires_at=datetime.datetime.fromtimestamp(exp, tz=datetime.timezone.utc),
        )
