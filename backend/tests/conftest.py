"""Pytest fixtures: SQLite for the relational store, mongomock for the access log."""
from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.dependencies import get_access_log_store
from app.main import app
from app.models.user import User, UserRole
from app.models.event import Event
from app.security import create_access_token, hash_password
from app.stores.interfaces import AccessLogStore, StoreUnavailableError
from app.stores.mongo_store import ACCESS_LOG_COLLECTION, MongoAccessLogStore, ensure_indexes

# Import all models so they register with Base.metadata
from app.models.category import Category              # noqa: F401
from app.models.registration import Registration      # noqa: F401
from app.models.certificate import Certificate        # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # SQLite ignores ON DELETE clauses unless foreign keys are switched on
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for arranging and inspecting rows."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def access_log_collection():
    """An in-memory ``access_log`` collection."""
    collection = mongomock.MongoClient()["event_registry"][ACCESS_LOG_COLLECTION]
    ensure_indexes(collection)
    return collection


@pytest.fixture(scope="function")
def access_log_store(access_log_collection):
    return MongoAccessLogStore(access_log_collection)


@pytest.fixture(scope="function")
def client(db_engine, access_log_store):
    """TestClient with SQLite and the mongomock access log wired in."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_access_log_store] = lambda: access_log_store
    # no context manager: startup would try to reach a real MongoDB
    yield TestClient(app)
    app.dependency_overrides.clear()


class FailingAccessLogStore(AccessLogStore):
    """Behaves like a MongoDB server that has gone away."""

    def _fail(self, *args, **kwargs):
        raise StoreUnavailableError("connection refused")

    insert = list_page = list_by_period = get = count = update = delete = _fail


@pytest.fixture
def failing_access_log(client):
    app.dependency_overrides[get_access_log_store] = lambda: FailingAccessLogStore()
    return client


@pytest.fixture
def missing_access_log(client):
    """MongoDB was unreachable at startup."""
    app.dependency_overrides[get_access_log_store] = lambda: None
    return client


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def create_test_user(db, name: str = "Test User", role: UserRole = UserRole.participant,
                     email: str | None = None, password: str = DEFAULT_PASSWORD) -> User:
    """Helper: insert a user directly (the API refuses to self-register administrators)."""
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def future(days: int = 7) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def create_test_event(client: TestClient, organizer: User, title: str = "Workshop",
                      days_ahead: int = 7, category_id: int | None = None) -> dict:
    """Helper: POST /api/events/ as ``organizer`` and return the event data."""
    resp = client.post("/api/events/", headers=auth_headers(organizer), json={
        "title": title,
        "description": f"{title} description",
        "event_datetime": future(days_ahead).isoformat(),
        "category_id": category_id,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def move_event_to_past(db, event_id: int, days_ago: int = 1) -> None:
    """Helper: backdate an event; the API only accepts future dates."""
    past = datetime.now(timezone.utc) - timedelta(days=days_ago)
    db.query(Event).filter(Event.id == event_id).update({"event_datetime": past})
    db.commit()


def register(client: TestClient, user: User, event_id: int, user_id: int | None = None):
    payload = {"event_id": event_id}
    if user_id is not None:
        payload["user_id"] = user_id
    return client.post("/api/registrations/", headers=auth_headers(user), json=payload)
