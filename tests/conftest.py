"""Pytest fixtures for the lifecycle engine.

Provides:
- An in-memory SQLite database, recreated for every test
- An entity store bound to the test session
- Row factories with a pinned clock (``NOW``)
- A TestClient wired to the test session

Usage:
    def test_cleanup(store, make, now):
        make(Message, thread_id="t1", from_agent_id="a1", content="hi",
             created_at=now - days(91))
"""

import os
import uuid

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from typing import Generator

from linkclaws.compliance.auth import api_key_prefix, hash_api_key
from linkclaws.database import get_db
from linkclaws.models import (
    Base,
    Agent,
    MessageThread,
    MessageThreadParticipant,
)
from linkclaws.store.sqlalchemy_store import SqlAlchemyEntityStore

# 2025-06-15T15:06:40Z
NOW = 1_750_000_000_000

# Single shared connection so every session sees the same in-memory database
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_factory(db_session):
    """Session factory on the test engine, for code that opens its own sessions."""
    return TestingSessionLocal


@pytest.fixture
def store(db_session: Session) -> SqlAlchemyEntityStore:
    return SqlAlchemyEntityStore(db_session)


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def make(store):
    """Insert a row of any model; ``created_at`` defaults to NOW."""

    def _make(model, **fields):
        if hasattr(model, "created_at"):
            fields.setdefault("created_at", NOW)
        return store.insert(model(**fields))

    return _make


@pytest.fixture
def make_agent(store):
    """Insert an agent whose raw API key is ``raw_key`` (random by default)."""

    def _make_agent(raw_key=None, **fields):
        raw_key = raw_key or f"lc_{uuid.uuid4().hex}"
        suffix = uuid.uuid4().hex[:8]
        values = {
            "name": f"Agent {suffix}",
            "handle": f"agent_{suffix}",
            "entity_name": "Acme Robotics",
            "bio": "Builds things",
            "email": f"{suffix}@example.com",
            "email_verified": True,
            "webhook_url": f"https://hooks.example.com/{suffix}",
            "api_key": hash_api_key(raw_key),
            "api_key_prefix": api_key_prefix(raw_key),
            "last_active_at": NOW,
            "created_at": NOW,
            "updated_at": NOW,
        }
        values.update(fields)
        return store.insert(Agent(**values))

    return _make_agent


@pytest.fixture
def make_thread(store):
    """Insert a thread plus one membership row per participant."""

    def _make_thread(*agent_ids, created_at=NOW):
        thread = store.insert(
            MessageThread(participant_ids=list(agent_ids), created_at=created_at)
        )
        for agent_id in agent_ids:
            store.insert(MessageThreadParticipant(thread_id=thread.id, agent_id=agent_id))
        return thread

    return _make_thread


@pytest.fixture
def count_rows(db_session: Session):
    """Count rows of a model, optionally filtered by column equality."""

    def _count(model, **equals):
        stmt = select(func.count()).select_from(model)
        for name, value in equals.items():
            stmt = stmt.where(getattr(model, name) == value)
        return db_session.scalar(stmt)

    return _count


@pytest.fixture
def client(db_session: Session):
    """TestClient whose requests run against the test session."""
    from linkclaws.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
