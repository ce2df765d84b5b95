# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Environment variables are set before any slotswapper import because
# slotswapper.config and slotswapper.database read them at import time.
# Every test gets its own SQLite file so sessions behave like separate
# connections to a real database.
# =============================================================================

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from slotswapper.database import Base, build_engine, get_db  # noqa: E402
from slotswapper.domain.swaps.schemas import SwapRequestCreate  # noqa: E402
from slotswapper.domain.swaps.service import SwapService  # noqa: E402
from slotswapper.main import app  # noqa: E402
from slotswapper.models import Event, EventStatus, SwapRequest, SwapStatus, User  # noqa: E402


class RecordingNotificationSink:
    """Notification sink double that keeps every payload it is handed"""

    def __init__(self):
        self.sent = []

    def notify(self, payload):
        self.sent.append(payload)

    def types_for(self, user_id):
        return [p.type.value for p in self.sent if p.user_id == user_id]


class FailingNotificationSink:
    def __init__(self):
        self.attempts = 0

    def notify(self, payload):
        self.attempts += 1
        raise RuntimeError("notification backend is down")


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'slotswapper-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sink():
    return RecordingNotificationSink()


@pytest.fixture
def swap_service(db, sink):
    return SwapService(db, sink)


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def make_user(db):
    def _make_user(name, email=None):
        user = User(
            name=name,
            email=email or f"{name.lower()}@example.com",
            hashed_password="not-a-real-hash",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_event(db):
    def _make_event(owner, start, end, status=EventStatus.SWAPPABLE, title="Slot"):
        event = Event(
            owner_id=owner.id,
            title=title,
            start_time=start,
            end_time=end,
            status=EventStatus(status).value,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


@pytest.fixture
def alice(make_user):
    return make_user("Alice")


@pytest.fixture
def bob(make_user):
    return make_user("Bob")


@pytest.fixture
def carol(make_user):
    return make_user("Carol")


@pytest.fixture
def morning_slot(make_event, alice):
    """Alice, 10:00-11:00, swappable"""
    return make_event(alice, datetime(2026, 3, 2, 10, 0), datetime(2026, 3, 2, 11, 0), title="Standup")


@pytest.fixture
def afternoon_slot(make_event, bob):
    """Bob, 14:00-15:00, swappable"""
    return make_event(bob, datetime(2026, 3, 2, 14, 0), datetime(2026, 3, 2, 15, 0), title="Review")


# =============================================================================
# Slot lock check
# =============================================================================


def assert_slot_locks_consistent(session):
    """An event is SWAP_PENDING exactly when one PENDING request references it"""
    session.expire_all()
    pending = session.query(SwapRequest).filter(SwapRequest.status == SwapStatus.PENDING.value).all()
    references = {}
    for request in pending:
        for slot_id in (request.requester_slot_id, request.requested_slot_id):
            references[slot_id] = references.get(slot_id, 0) + 1

    for event in session.query(Event).all():
        if event.status == EventStatus.SWAP_PENDING:
            assert references.get(event.id) == 1, f"event {event.id} locked without exactly one request"
        else:
            assert event.id not in references, f"event {event.id} referenced by a pending request"


# =============================================================================
# HTTP fixtures
# =============================================================================


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Create an account over HTTP and return (user_json, auth_headers)"""

    def _signup(name, email=None, password="hunter22"):
        response = client.post(
            "/api/auth/signup",
            json={"name": name, "email": email or f"{name.lower()}@example.com", "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _signup


@pytest.fixture
def failing_sink():
    return FailingNotificationSink()


@pytest.fixture
def check_slot_locks(db):
    """Callable asserting assert_slot_locks_consistent against the test database"""
    return lambda: assert_slot_locks_consistent(db)


@pytest.fixture
def request_swap():
    """Shorthand for SwapService.create_swap_request"""

    def _request_swap(service, user, my_slot, their_slot, message=None):
        data = SwapRequestCreate(mySlotId=my_slot.id, theirSlotId=their_slot.id, message=message)
        return service.create_swap_request(data, user)

    return _request_swap
