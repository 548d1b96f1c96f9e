"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database; R2 and the LLM are faked.
"""

import io
import os
from datetime import date, timedelta

# Set test environment variables before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from farewelly import storage  # noqa: E402
from farewelly.auth import create_session  # noqa: E402
from farewelly.database import Base, SessionLocal, engine  # noqa: E402
from farewelly.domain.assistant.router import ai_chat_limit  # noqa: E402
from farewelly.main import app  # noqa: E402
from farewelly.models import Booking, UserProfile  # noqa: E402


async def _no_rate_limit():
    return None


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[ai_chat_limit] = _no_rate_limit
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory creating an active user of the given type"""
    counter = {"n": 0}

    def _make(user_type: str = "family", **fields) -> UserProfile:
        counter["n"] += 1
        defaults = {
            "email": f"{user_type}{counter['n']}@example.nl",
            "name": f"{user_type.capitalize()} {counter['n']}",
            "user_type": user_type,
            "status": "active",
        }
        if user_type == "venue":
            defaults.update(venue_name=f"Aula {counter['n']}", price_per_hour=100.0)
        if user_type == "director":
            defaults["company_name"] = f"Uitvaartzorg {counter['n']}"
        defaults.update(fields)
        user = UserProfile(**defaults)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers(db):
    def _headers(user: UserProfile) -> dict:
        return {"Authorization": f"Bearer {create_session(db, user)}"}

    return _headers


@pytest.fixture
def family(make_user):
    return make_user("family")


@pytest.fixture
def director(make_user):
    return make_user("director")


@pytest.fixture
def venue(make_user):
    return make_user("venue")


@pytest.fixture
def future_day():
    return date.today() + timedelta(days=14)


@pytest.fixture
def make_booking(db, future_day):
    def _make(family, director=None, venue=None, status="pending", **fields) -> Booking:
        booking = Booking(
            family_id=family.id,
            director_id=director.id if director else None,
            venue_id=venue.id if venue else None,
            service_type=fields.pop("service_type", "cremation"),
            date=fields.pop("date", future_day),
            time=fields.pop("time", "10:00"),
            duration=fields.pop("duration", 120),
            status=status,
            **fields,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


class FakeR2:
    """In-memory stand-in for the boto3 S3 client used for R2"""

    def __init__(self):
        self.objects = {}
        self.fail_uploads = False

    def put_object(self, Bucket, Key, Body, ContentType=None):
        if self.fail_uploads:
            raise RuntimeError("R2 unavailable")
        self.objects[Key] = Body

    def get_object(self, Bucket, Key):
        return {"Body": io.BytesIO(self.objects[Key])}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://r2.example/{Params['Key']}?expires={ExpiresIn}"


@pytest.fixture
def fake_r2(monkeypatch):
    fake = FakeR2()
    monkeypatch.setattr(storage, "get_r2_client", lambda: fake)
    return fake
