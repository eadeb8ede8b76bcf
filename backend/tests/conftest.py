# tests/conftest.py

import os
import tempfile
from datetime import date, datetime

# --- Point the app at a throwaway SQLite file before anything imports it ---
_TEST_DB_DIR = tempfile.mkdtemp(prefix="roombook-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402
from starlette.testclient import TestClient  # noqa: E402

from roombook.api import deps  # noqa: E402
from roombook.core.config import BookingRules  # noqa: E402
from roombook.db import engine  # noqa: E402
from roombook.main import app  # noqa: E402
from roombook.models import Room, User, UserRole  # noqa: E402
from roombook.schemas import BookingCreate  # noqa: E402

# Day before the 2024-01-01 scenarios, inside office hours
FIXED_NOW = datetime(2023, 12, 31, 12, 0)


class RecordingSink:
    """Event sink that keeps published events for assertions."""

    def __init__(self):
        self.events = []

    def publish(self, booking_event):
        self.events.append(booking_event)

    def kinds(self):
        return [event.kind for event in self.events]

    def of_kind(self, kind):
        return [event for event in self.events if event.kind == kind]


@pytest.fixture(autouse=True)
def reset_database():
    SQLModel.metadata.drop_all(bind=engine)
    SQLModel.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session():
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def rules():
    return BookingRules()


def _add(session, obj):
    session.add(obj)
    session.commit()
    return obj


@pytest.fixture
def admin(session):
    return _add(
        session,
        User(email="admin@example.com", full_name="Ada Admin", role=UserRole.ADMIN),
    )


@pytest.fixture
def employee(session):
    return _add(session, User(email="erin@example.com", full_name="Erin Employee"))


@pytest.fixture
def other_employee(session):
    return _add(session, User(email="omar@example.com", full_name="Omar Other"))


@pytest.fixture
def room(session):
    return _add(session, Room(name="Boardroom", capacity=10, location="3rd floor"))


@pytest.fixture
def make_payload(room):
    """Build a booking request for ``room``; keyword overrides win."""

    def _make(**overrides):
        data = {
            "room_id": room.id,
            "date": date(2024, 1, 1),
            "start_time": "10:00",
            "end_time": "11:00",
            "purpose": "Weekly sync",
            "persons": 4,
        }
        data.update(overrides)
        return BookingCreate(**data)

    return _make


# --- Test Client Fixtures ---
@pytest.fixture
def client(sink):
    """TestClient with the clock, the event sink and the current user overridden.

    Tests pick the acting user through the ``act_as`` fixture.
    """
    app.dependency_overrides[deps.get_event_sink] = lambda: sink
    app.dependency_overrides[deps.get_clock] = lambda: (lambda: FIXED_NOW)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def act_as(client):
    def _act_as(user):
        app.dependency_overrides[deps.get_current_user] = lambda: user
        return client

    return _act_as
