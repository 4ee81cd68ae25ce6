"""
- Spins up temp test DB
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Pin "today" so date-dependent routes are deterministic.
- Provide a client fixture (TestClient(app)) that already has the overrides applied.
"""
import os
import pytest
from datetime import date, timedelta
from typing import Generator

# Ensure the app does NOT run dev-only startup hooks, and never needs a real DB
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fusdle.db import Base, get_db
from fusdle.main import app, get_today
from fusdle.repository import PuzzleRepository
from fusdle.store import SessionStore
from fusdle import models

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
TODAY = date(2025, 6, 1)


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM puzzles"))
    yield


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session, a pinned date and a fresh session store."""
    def _get_db_for_tests():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_for_tests
    app.dependency_overrides[get_today] = lambda: TODAY
    app.state.sessions = SessionStore()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def repo(db_session) -> PuzzleRepository:
    return PuzzleRepository(db_session)


@pytest.fixture
def puzzles(repo):
    """
    Puzzle #1 is yesterday's (archive), #2 is today's, #3 is tomorrow's.
    #2 exists in both difficulties; #4 is a fusion twist.
    """
    yesterday = TODAY - timedelta(days=1)
    tomorrow = TODAY + timedelta(days=1)
    return {
        "past": repo.create(1, yesterday, ["🏠", "🧹"], "Housekeeping", ["Daily chores", "Tidy up", "Hotel staff"]),
        "today": repo.create(2, TODAY, ["🥜", "🧈", "🍫"], "Peanut Butter Cup", ["Sweet treat", "Orange wrapper", "Reese's"]),
        "today_hard": repo.create(2, TODAY, ["🧠", "⛈️"], "Brain Storm", ["Think together", "Mental weather"], difficulty="hard"),
        "future": repo.create(3, tomorrow, ["🔥", "🧯"], "Fire Extinguisher", ["Red canister", "Safety first", "Pull the pin"]),
        "fusion": repo.create(4, yesterday, ["🦁", "🐯"], "Liger", ["Hybrid cat", "Mixed predator"],
                              is_fusion_twist=True, twist_type="Animal Fusion"),
    }


@pytest.fixture
def client():
    return TestClient(app)
