import os
import tempfile
from datetime import datetime, timedelta, timezone

# Keep the application's own engine away from any real database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from eventbook.core.permissions import Role
from eventbook.core.security import create_access_token
from eventbook.database.db import Base, get_db, make_engine
from eventbook.main import app
from eventbook.models import Booking, Event, User

# File-backed SQLite so every thread gets its own connection in the
# concurrency tests
TEST_DB_DIR = tempfile.mkdtemp(prefix="eventbook-tests-")
SQLALCHEMY_DATABASE_URL = f"sqlite:///{os.path.join(TEST_DB_DIR, 'test.db')}"
engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def fake_redis():
    server = fakeredis.FakeServer()
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    """Point the ledger's per-event locks at fakeredis."""
    monkeypatch.setattr("eventbook.services.bookings.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture
def db_session(setup_database):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(setup_database):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session: Session):
    counter = {"n": 0}

    def _make_user(role: Role = Role.GUEST, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            first_name=f"User{counter['n']}",
            last_name="Test",
            email=email or f"user{counter['n']}@example.com",
            role=int(role),
            hashed_password="not-a-real-hash",
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_event(db_session: Session):
    def _make_event(host: User, seats_total: int = 10, seats_filled: int = 0, title: str = "Test Event") -> Event:
        event = Event(
            title=title,
            date=datetime.now(timezone.utc) + timedelta(days=7),
            address="1 Test Street",
            description="An event for tests",
            seats_total=seats_total,
            seats_filled=seats_filled,
            host_id=host.id,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def make_booking(db_session: Session):
    """Insert a booking row directly, bypassing the ledger (no counter change)."""

    def _make_booking(event: Event, user: User) -> Booking:
        booking = Booking(event_id=event.id, user_id=user.id, guest_name=user.first_name, contact=user.email)
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make_booking


@pytest.fixture
def host(make_user) -> User:
    return make_user(Role.HOST)


@pytest.fixture
def guest(make_user) -> User:
    return make_user(Role.GUEST)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user_id=user.id, role=Role(user.role))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def session_factory():
    """Independent sessions, one per worker thread."""
    return TestingSessionLocal
