import datetime

import jwt
import pytest

from universe.auth.roles import Role
from universe.auth.tokens import JWTManager, TokenSettings
from universe.errors import InvalidToken, ServerMisconfigured, TokenExpired

SECRET = "unit-test-secret-with-at-least-32-bytes"
T0 = datetime.datetime(2025, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(T0)


@pytest.fixture
def manager(clock):
    return JWTManager(TokenSettings(secret_key=SECRET), clock=clock)


def test_issue_and_decode_claims(manager):
    token = manager.issue("user-1", Role.ORGANISATION, email="org@example.com")
    claims = manager.decode(token)

    assert claims.id == "user-1"
    assert claims.role is Role.ORGANISATION
    assert claims.email == "org@example.com"
    assert claims.expires_at == T0 + datetime.timedelta(days=7)


def test_email_claim_is_optional(manager):
    claims = manager.decode(manager.issue("user-2", Role.STUDENT))
    assert claims.email is None
    assert claims.role is Role.STUDENT


def test_payload_carries_standard_expiry(manager):
    token = manager.issue("user-1", Role.STUDENT)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})

    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600
    assert payload["role"] == "STUDENT"


def test_expiry_boundary(manager, clock):
    token = manager.issue("user-1", Role.STUDENT)
    expires = T0 + datetime.timedelta(days=7)

    clock.now = expires - datetime.timedelta(seconds=1)
    assert manager.decode(token).id == "user-1"

    clock.now = expires
    with pytest.raises(TokenExpired):
        manager.decode(token)

    clock.now = expires + datetime.timedelta(days=30)
    with pytest.raises(TokenExpired):
        manager.decode(token)


def test_wrong_secret_is_invalid_not_expired(manager, clock):
    other = JWTManager(TokenSettings(secret_key="someone-else-with-a-long-enough-key"), clock=clock)
    token = other.issue("user-1", Role.ORGANISATION)

    with pytest.raises(InvalidToken) as excinfo:
        manager.decode(token)
    assert excinfo.value.status_code == 403


def test_tampered_payload_is_invalid(manager):
    token = manager.issue("user-1", Role.STUDENT)
    header, payload, signature = token.split(".")
    forged = jwt.encode({"id": "user-1", "role": "ORGANISATION", "exp": 9999999999}, "a-different-key-of-sufficient-length")
    tampered = ".".join([header, forged.split(".")[1], signature])

    with pytest.raises(InvalidToken):
        manager.decode(tampered)


@pytest.mark.parametrize("token", ["not-a-token", "a.b.c", ""])
def test_malformed_tokens_are_invalid(manager, token):
    with pytest.raises(InvalidToken):
        manager.decode(token)


def test_unknown_role_claim_is_invalid(manager):
    exp = int((T0 + datetime.timedelta(days=1)).timestamp())
    token = jwt.encode({"id": "user-1", "role": "ADMIN", "exp": exp}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidToken):
        manager.decode(token)


def test_missing_id_claim_is_invalid(manager):
    exp = int((T0 + datetime.timedelta(days=1)).timestamp())
    token = jwt.encode({"role": "STUDENT", "exp": exp}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidToken):
        manager.decode(token)


def test_missing_secret_is_fatal_misconfiguration(clock):
    manager = JWTManager(TokenSettings(secret_key=None), clock=clock)

    with pytest.raises(ServerMisconfigured) as excinfo:
        manager.issue("user-1", Role.STUDENT)
    assert excinfo.value.status_code == 500


def test_settings_from_config():
    settings = TokenSettings.from_config({"JWT_SECRET": "s", "JWT_EXPIRE_DAYS": 3})

    assert settings.secret_key == "s"
    assert settings.algorithm == "HS256"
    assert settings.lifetime == datetime.timedelta(days=3)
    assert TokenSettings.from_config({"JWT_SECRET": ""}).secret_key is None
