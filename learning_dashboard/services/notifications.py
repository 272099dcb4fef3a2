"""Insert notifications for achievements and quiz scores.

Rows land in the store from anywhere (other services, migrations, a SQL
console), so new ones are detected at the store rather than in this process:

* Postgres: LISTEN on the channel fed by the `activity_inserts` trigger
  (alembic revision 002), through a dedicated asyncpg connection.
* Any other backend: poll both tables for ids above a high-water mark.

Both watchers publish ActivityEventSchema items to an ActivityBroker, which
fans them out to the open /api/activity-stream connections.
"""
import asyncio
import json
import logging

import asyncpg
from sqlalchemy import func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learning_dashboard.core.config import Settings
from learning_dashboard.db.session import get_session_factory
from learning_dashboard.models.achievement import Achievement
from learning_dashboard.models.quiz_score import QuizScore
from learning_dashboard.models.user import User
from learning_dashboard.schemas.activity import ActivityEventSchema

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"
ACTIVITY_CHANNEL = "activity_inserts"

# table -> (model, title column, verb)
SOURCES = {
    "achievements": (Achievement, Achievement.name, "Earned"),
    "quiz_scores": (QuizScore, QuizScore.quiz_name, "Completed"),
}


def build_event(table: str, row_id: int | None, user_name: str | None, title: str) -> ActivityEventSchema:
    verb = SOURCES[table][2]
    return ActivityEventSchema(
        name=user_name or UNKNOWN_USER,
        action=f"{verb} {title}",
        table=table,
        row_id=row_id,
    )


def event_from_notification(payload: str) -> ActivityEventSchema:
    """Parse a trigger payload: {"table", "id", "user_name", "title"}."""
    data = json.loads(payload)
    return build_event(data["table"], data.get("id"), data.get("user_name"), data["title"])


class ActivityBroker:
    """Fan-out of insert events to per-subscriber queues."""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._queues: set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._queues.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._queues.discard(queue)

    def publish(self, event: ActivityEventSchema) -> None:
        logger.debug("Publishing %s to %d subscriber(s)", event, len(self._queues))
        for queue in list(self._queues):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Activity subscriber is %d events behind; dropping %s", queue.qsize(), event.action)


class PollingChangeWatcher:
    """Publishes rows whose id is above the last one seen, every `interval` seconds."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        broker: ActivityBroker,
        interval: float = 2.0,
    ):
        self.session_factory = session_factory
        self.broker = broker
        self.interval = interval
        self._marks: dict[str, int] = {}
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        async with self.session_factory() as session:
            for table, (model, _, _) in SOURCES.items():
                result = await session.execute(select(func.coalesce(func.max(model.id), 0)))
                self._marks[table] = result.scalar_one()
        logger.info("Watching for new activity rows every %.1fs (from ids %s)", self.interval, self._marks)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def poll_once(self) -> int:
        """Publish rows inserted since the previous poll; returns how many."""
        published = 0
        async with self.session_factory() as session:
            for table, (model, title, _) in SOURCES.items():
                statement = (
                    select(model.id, User.name, title)
                    .select_from(model)
                    .outerjoin(User, model.user_id == User.id)
                    .where(model.id > self._marks.get(table, 0))
                    .order_by(model.id)
                )
                for row_id, user_name, row_title in (await session.execute(statement)).all():
                    self.broker.publish(build_event(table, row_id, user_name, row_title))
                    self._marks[table] = row_id
                    published += 1
        return published

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.poll_once()
            except SQLAlchemyError:
                logger.exception("Activity poll failed; retrying in %.1fs", self.interval)


class PostgresChangeWatcher:
    """LISTENs on the insert-trigger channel over its own asyncpg connection."""

    def __init__(self, dsn: str, broker: ActivityBroker, channel: str = ACTIVITY_CHANNEL):
        self.dsn = dsn
        self.broker = broker
        self.channel = channel
        self._connection: asyncpg.Connection | None = None

    async def start(self) -> None:
        self._connection = await asyncpg.connect(self.dsn)
        await self._connection.add_listener(self.channel, self._on_notify)
        logger.info("Listening on channel %s", self.channel)

    async def stop(self) -> None:
        if self._connection is None:
            return
        try:
            await self._connection.remove_listener(self.channel, self._on_notify)
        finally:
            await self._connection.close()
            self._connection = None

    def _on_notify(self, connection, pid: int, channel: str, payload: str) -> None:
        try:
            event = event_from_notification(payload)
        except (ValueError, KeyError):
            logger.warning("Ignoring malformed %s payload: %r", channel, payload)
            return
        self.broker.publish(event)


def asyncpg_dsn(url: str) -> str:
    """postgresql+asyncpg://... -> postgresql://... (asyncpg takes plain libpq URLs)."""
    return make_url(url).set(drivername="postgresql").render_as_string(hide_password=False)


def create_change_watcher(settings: Settings, broker: ActivityBroker):
    url = settings.store_url_with_key()
    if make_url(url).get_backend_name() == "postgresql":
        return PostgresChangeWatcher(asyncpg_dsn(url), broker, settings.activity_channel)
    return PollingChangeWatcher(get_session_factory(settings), broker, settings.activity_watch_interval)
