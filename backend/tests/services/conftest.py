"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so readiness probes see the test engine
    - make_question inserts rows directly, with explicit created_at when ordering matters

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      so toggle serialization under test comes from the per-question asyncio lock
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from qbank.db.base import Base
from qbank.infrastructure.database import (
    get_db, guarded_session, DatabaseSessionManager,
)
from qbank.models.question import Question
from qbank.services.question_store import QuestionStore
from qbank.services.upvote_toggle import UpvoteToggleEngine
import qbank.infrastructure.database as db_module
from qbank.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def store(test_db):
    return QuestionStore(test_db)


@pytest.fixture
def upvote_engine(test_db):
    return UpvoteToggleEngine(test_db)


@pytest.fixture
def make_question(test_db):
    """Insert a Question row; keyword overrides replace the defaults."""

    async def _make(**overrides) -> Question:
        fields = {
            "question_text": "Explain how hashing works",
            "company": "Meta",
            "topic": "DS",
            "role": "SWE",
            "difficulty": "Medium",
            "submitted_by": None,
            "upvotes": 0,
            "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
            "updated_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        question = Question(**fields)
        test_db.add(question)
        await test_db.commit()
        await test_db.refresh(question)
        return question

    return _make


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with guarded_session(test_session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
