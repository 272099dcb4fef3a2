"""Shared fixtures: a seeded SQLite store file and an app wired to it.

Rows are written through a sync engine; the app reads them through aiosqlite.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from learning_dashboard.core.config import Settings, get_settings
from learning_dashboard.db.base import (
    Achievement,
    Base,
    LearningPathEntry,
    QuizScore,
    SkillLearned,
    SkillMatch,
    User,
)
from learning_dashboard.db.session import get_session_factory
from learning_dashboard.main import create_app

FIRST_LOGIN_AT = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "store.db"


@pytest.fixture
def sync_engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded(sync_engine):
    """Admin, Alice (with a full record set) and Bob (one recent quiz)."""
    now = datetime.now(timezone.utc)
    with Session(sync_engine) as s:
        admin = User(name="Admin", email="admin@example.com", role="admin", resume_score=Decimal("9.0"), xp_points=90)
        alice = User(name="Alice", email="alice@example.com", role="user", resume_score=Decimal("7.5"), xp_points=60)
        bob = User(name="Bob", email="bob@example.com", role="user", resume_score=Decimal("6.0"), xp_points=40)
        s.add_all([admin, alice, bob])
        s.flush()

        s.add_all(
            [
                QuizScore(user_id=alice.id, quiz_name="JS Basics", score=Decimal("8.5"), created_at=now - timedelta(days=2)),
                QuizScore(user_id=alice.id, quiz_name="React", score=Decimal("9.0"), created_at=now - timedelta(days=1)),
                QuizScore(user_id=bob.id, quiz_name="Python Quiz", score=Decimal("7.0"), created_at=now - timedelta(hours=1)),
                SkillLearned(user_id=alice.id, name="React", level=60, completed=True),
                SkillLearned(user_id=alice.id, name="Python", level=40, completed=False),
                SkillMatch(user_id=alice.id, skill_name="React", match_percentage=60),
                SkillMatch(user_id=alice.id, skill_name="React", match_percentage=75),
                SkillMatch(user_id=alice.id, skill_name="Python", match_percentage=50),
                LearningPathEntry(user_id=alice.id, month="Jan", progress=10, created_at=now - timedelta(days=60)),
                LearningPathEntry(user_id=alice.id, month="Feb", progress=25, created_at=now - timedelta(days=30)),
                Achievement(user_id=alice.id, name="First Login", date=FIRST_LOGIN_AT),
                Achievement(user_id=alice.id, name="Streak", date=now - timedelta(minutes=5)),
            ]
        )
        s.commit()
    return sync_engine


@pytest.fixture
def drop_table(seeded):
    """Break one store read by removing its table."""

    def drop(table: str) -> None:
        with seeded.begin() as conn:
            conn.execute(text(f"DROP TABLE {table}"))

    return drop


@pytest.fixture
def settings(db_path):
    return Settings(store_url=f"sqlite+aiosqlite:///{db_path}", store_service_key="test-key")


@pytest.fixture
def session_factory(settings):
    engine = create_async_engine(settings.store_url, poolclass=NullPool)
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def app(settings, session_factory, seeded):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
