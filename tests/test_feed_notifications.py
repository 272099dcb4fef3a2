"""Tests for the activity feed buffer and store insert notifications."""
import ast
import asyncio
import json
from contextlib import asynccontextmanager
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from learning_dashboard.client.demo import DEMO_ACTIVITY
from learning_dashboard.client.feed import ActivityFeed
from learning_dashboard.core.config import Settings
from learning_dashboard.models import Achievement, QuizScore
from learning_dashboard.schemas.activity import ActivityEventSchema
from learning_dashboard.services.notifications import (
    ActivityBroker,
    PollingChangeWatcher,
    PostgresChangeWatcher,
    asyncpg_dsn,
    create_change_watcher,
    event_from_notification,
)

CLIENT_DIR = Path(__file__).resolve().parent.parent / "learning_dashboard" / "client"


class TestActivityFeed:
    def test_starts_with_demo_items(self):
        assert ActivityFeed().items == DEMO_ACTIVITY

    def test_push_prepends_and_caps(self):
        feed = ActivityFeed(size=3)
        feed.push("Ann", "Earned Badge")
        assert len(feed) == 3
        assert feed.items[0] == {"name": "Ann", "action": "Earned Badge", "time": "just now"}
        assert feed.items[1] == DEMO_ACTIVITY[0]

    def test_no_deduplication(self):
        feed = ActivityFeed(size=3, initial=[])
        feed.push("Ann", "Earned Badge")
        feed.push("Ann", "Earned Badge")
        assert len(feed) == 2

    def test_replace_truncates(self):
        feed = ActivityFeed(size=2)
        feed.replace([{"name": str(i), "action": "x", "time": "just now"} for i in range(5)])
        assert [i["name"] for i in feed.items] == ["0", "1"]

    def test_push_event_takes_decoded_stream_payload(self):
        feed = ActivityFeed(initial=[])
        event = ActivityEventSchema(name="Ben", action="Completed Quiz", table="quiz_scores", row_id=4)
        feed.push_event(json.loads(event.model_dump_json()))
        feed.push_event({"name": "Ann", "action": "Earned Badge"})
        assert feed.items == [
            {"name": "Ann", "action": "Earned Badge", "time": "just now"},
            {"name": "Ben", "action": "Completed Quiz", "time": "just now"},
        ]


def test_client_package_has_no_server_imports():
    forbidden = ("sqlalchemy", "asyncpg", "fastapi", "learning_dashboard.services", "learning_dashboard.models", "learning_dashboard.db")
    for path in CLIENT_DIR.glob("*.py"):
        for node in ast.walk(ast.parse(path.read_text())):
            if isinstance(node, ast.ImportFrom):
                names = [node.module or ""]
            elif isinstance(node, ast.Import):
                names = [alias.name for alias in node.names]
            else:
                continue
            for name in names:
                assert not name.startswith(forbidden), f"{path.name} imports {name}"


class TestActivityBroker:
    @pytest.mark.asyncio
    async def test_fans_out_to_every_subscriber(self):
        broker = ActivityBroker()
        first, second = broker.subscribe(), broker.subscribe()
        event = ActivityEventSchema(name="Ann", action="Earned Badge", table="achievements")
        broker.publish(event)
        assert first.get_nowait() == event
        assert second.get_nowait() == event

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        broker = ActivityBroker()
        queue = broker.subscribe()
        broker.unsubscribe(queue)
        broker.publish(ActivityEventSchema(name="Ann", action="Earned Badge", table="achievements"))
        assert queue.empty()
        assert broker.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_slow_subscriber_drops_instead_of_blocking(self):
        broker = ActivityBroker(queue_size=1)
        slow, fast = broker.subscribe(), broker.subscribe()
        broker.publish(ActivityEventSchema(name="Ann", action="Earned A", table="achievements"))
        fast.get_nowait()
        broker.publish(ActivityEventSchema(name="Ann", action="Earned B", table="achievements"))
        assert slow.get_nowait().action == "Earned A"
        assert slow.empty()
        assert fast.get_nowait().action == "Earned B"


@asynccontextmanager
async def watching(session_factory, interval: float = 60):
    broker = ActivityBroker()
    queue = broker.subscribe()
    watcher = PollingChangeWatcher(session_factory, broker, interval=interval)
    await watcher.start()
    try:
        yield watcher, queue
    finally:
        await watcher.stop()


def drain(queue: asyncio.Queue) -> list[ActivityEventSchema]:
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


class TestPollingChangeWatcher:
    @pytest.mark.asyncio
    async def test_existing_rows_are_not_replayed(self, seeded, session_factory):
        async with watching(session_factory) as (watcher, queue):
            assert await watcher.poll_once() == 0
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_publishes_rows_written_by_another_connection(self, seeded, session_factory):
        async with watching(session_factory) as (watcher, queue):
            with Session(seeded) as s:
                s.add(Achievement(user_id=3, name="Night Owl"))
                s.add(QuizScore(user_id=2, quiz_name="SQL", score=Decimal("9.5")))
                s.commit()

            assert await watcher.poll_once() == 2
            # each row once
            assert await watcher.poll_once() == 0

        achievement, quiz = drain(queue)
        assert (achievement.name, achievement.action, achievement.time) == ("Bob", "Earned Night Owl", "just now")
        assert achievement.table == "achievements"
        assert achievement.row_id is not None
        assert (quiz.name, quiz.action, quiz.table) == ("Alice", "Completed SQL", "quiz_scores")

    @pytest.mark.asyncio
    async def test_unknown_owner(self, seeded, session_factory):
        async with watching(session_factory) as (watcher, queue):
            with Session(seeded) as s:
                s.add(Achievement(user_id=999, name="Ghost"))
                s.commit()
            await watcher.poll_once()
        assert drain(queue)[0].name == "Unknown User"

    @pytest.mark.asyncio
    async def test_background_loop_publishes(self, seeded, session_factory):
        async with watching(session_factory, interval=0.02) as (watcher, queue):
            with Session(seeded) as s:
                s.add(QuizScore(user_id=3, quiz_name="Rust", score=Decimal("6.0")))
                s.commit()
            event = await asyncio.wait_for(queue.get(), timeout=5)
        assert event.action == "Completed Rust"


class TestPostgresNotifications:
    def test_event_from_trigger_payload(self):
        payload = json.dumps({"table": "quiz_scores", "id": 12, "user_name": "Alice", "title": "SQL"})
        event = event_from_notification(payload)
        assert event == ActivityEventSchema(name="Alice", action="Completed SQL", table="quiz_scores", row_id=12)

    def test_missing_owner(self):
        payload = json.dumps({"table": "achievements", "id": 1, "user_name": None, "title": "Ghost"})
        assert event_from_notification(payload).name == "Unknown User"

    def test_listener_publishes_and_skips_malformed(self):
        broker = ActivityBroker()
        published = []
        broker.publish = published.append
        watcher = PostgresChangeWatcher("postgresql://localhost/db", broker)
        watcher._on_notify(None, 1, "activity_inserts", "not json")
        watcher._on_notify(None, 1, "activity_inserts", json.dumps({"table": "achievements"}))
        watcher._on_notify(
            None, 1, "activity_inserts", json.dumps({"table": "achievements", "id": 5, "user_name": "Bob", "title": "Night Owl"})
        )
        assert [event.action for event in published] == ["Earned Night Owl"]

    def test_asyncpg_dsn_drops_driver(self):
        assert asyncpg_dsn("postgresql+asyncpg://svc:key@db:5432/learning") == "postgresql://svc:key@db:5432/learning"

    def test_watcher_follows_backend(self, settings):
        broker = ActivityBroker()
        assert isinstance(create_change_watcher(settings, broker), PollingChangeWatcher)

        postgres = Settings(store_url="postgresql+asyncpg://svc@db/learning", store_service_key="key")
        watcher = create_change_watcher(postgres, broker)
        assert isinstance(watcher, PostgresChangeWatcher)
        assert watcher.dsn == "postgresql://svc:key@db/learning"
        assert watcher.channel == "activity_inserts"
