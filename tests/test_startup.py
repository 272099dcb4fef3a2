"""Tests for demo seeding and app startup."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from learning_dashboard.main import create_app
from learning_dashboard.models import User
from learning_dashboard.services.seeding import DEMO_USERS, seed_demo_data


class TestSeedDemoData:
    @pytest.mark.asyncio
    async def test_seeds_empty_store_once(self, sync_engine, session_factory):
        async with session_factory() as db:
            assert await seed_demo_data(db) == len(DEMO_USERS)
        async with session_factory() as db:
            assert await seed_demo_data(db) == 0
            count = (await db.execute(select(func.count(User.id)))).scalar_one()
        assert count == len(DEMO_USERS)

    @pytest.mark.asyncio
    async def test_skips_non_empty_store(self, seeded, session_factory):
        async with session_factory() as db:
            assert await seed_demo_data(db) == 0


class TestLifespan:
    def test_creates_and_seeds_store(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STORE_URL", f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")
        monkeypatch.setenv("STORE_SERVICE_KEY", "test-key")
        monkeypatch.setenv("SEED_DEMO_DATA", "true")

        with TestClient(create_app()) as client:
            response = client.get("/api/user-data", params={"currentUser": "yeswanth"})
            assert response.status_code == 200
            data = response.json()
            assert data["name"] == "yeswanth"
            assert len(data["quizScores"]) == 4

            users = client.get("/api/users", params={"currentUser": "admin"}).json()
            assert [u["name"] for u in users["users"]] == ["admin", "priya", "yeswanth"]

    def test_starts_without_credentials(self, monkeypatch):
        monkeypatch.delenv("STORE_URL", raising=False)
        monkeypatch.delenv("STORE_SERVICE_KEY", raising=False)

        with TestClient(create_app()) as client:
            assert client.get("/health").json() == {"status": "ok"}
            response = client.get("/api/recent-activity")
            assert response.status_code == 500
            assert response.json() == {"error": "Missing database credentials"}
