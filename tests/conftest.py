import base64
import os
import sys

# Ensure repo root is on sys.path so tests can import the universe package
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest

from universe import create_app

TEST_SECRET = "test-signing-secret-for-the-universe-suite"
PASSWORD = "Passw0rd"
# Smallest valid PNG header bytes are enough; images are stored as opaque blobs
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
IMAGE_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


def make_app(**overrides):
    config = {
        "TESTING": True,
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "RATELIMIT_ENABLED": False,
        "POST_CREATION_ROLES": ["STUDENT"],
        "LOG_LEVEL": "WARNING",
    }
    config.update(overrides)
    app = create_app(config)
    app.init_db()
    return app


@pytest.fixture
def app():
    app = make_app()
    yield app
    app.extensions["db_engine"].dispose()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register an account and return the JSON body ({token, user})."""

    def _register(email, password=PASSWORD, role="STUDENT", **extra):
        payload = {"email": email, "password": password, "role": role}
        payload.update(extra)
        r = client.post("/auth/register", json=payload)
        assert r.status_code == 201, r.get_json()
        return r.get_json()

    return _register


@pytest.fixture
def student(register):
    return register("alice@students.plymouth.ac.uk", role="STUDENT", name="Alice")


@pytest.fixture
def organiser(register):
    return register("events@music-soc.org", role="ORGANISATION", name="Music Society",
                    location="Plymouth")


@pytest.fixture
def other_organiser(register):
    return register("hello@drama-soc.org", role="ORGANISATION", name="Drama Society",
                    location="Plymouth")


@pytest.fixture
def event_payload():
    return {
        "title": "Gig",
        "date": "2025-01-01T20:00:00Z",
        "location": "Hall",
        "price": "£5.00",
    }
