"""Recent activity across all users: latest achievements and quiz completions.

Entries carry a coarse relative label ("5 min ago") and are ordered by that
label parsed back into minutes, not by the stored timestamp. Events that
round to the same label keep their merge order (achievements before quizzes).
"""
import logging
import re
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learning_dashboard.core.config import Settings
from learning_dashboard.core.errors import UpstreamReadFailure
from learning_dashboard.models.achievement import Achievement
from learning_dashboard.models.quiz_score import QuizScore
from learning_dashboard.models.user import User
from learning_dashboard.schemas.activity import ActivitySchema
from learning_dashboard.services.aggregation import gather_all

logger = logging.getLogger(__name__)

TIME_AGO_RE = re.compile(r"(\d+)\s+(min|hour|day)")
MINUTES_PER_UNIT = {"min": 1, "hour": 60, "day": 60 * 24}


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def time_ago(value: datetime, now: datetime | None = None) -> str:
    """Coarse relative label. Naive datetimes are taken as UTC."""
    now = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    minutes = int((now - value).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"

    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")

    return _plural(hours // 24, "day")


def parse_time_ago(label: str) -> int:
    """Minutes encoded in a time_ago() label; unknown labels count as 0."""
    if label == "just now":
        return 0
    match = TIME_AGO_RE.search(label)
    if not match:
        return 0
    return int(match.group(1)) * MINUTES_PER_UNIT[match.group(2)]


def merge_activity(
    achievements: list[tuple[str, str, datetime]],
    quizzes: list[tuple[str, str, datetime]],
    size: int,
    now: datetime | None = None,
) -> list[ActivitySchema]:
    """Merge (user name, title, timestamp) rows and keep the `size` most recent by label."""
    now = now or datetime.now(timezone.utc)
    activities = [
        ActivitySchema(name=user_name, action=f"Earned {title}", time=time_ago(ts, now))
        for user_name, title, ts in achievements
    ] + [
        ActivitySchema(name=user_name, action=f"Completed {title}", time=time_ago(ts, now))
        for user_name, title, ts in quizzes
    ]
    activities.sort(key=lambda a: parse_time_ago(a.time))
    return activities[:size]


async def _read_rows(session_factory: async_sessionmaker[AsyncSession], label: str, statement) -> list[tuple]:
    try:
        async with session_factory() as session:
            result = await session.execute(statement)
            return [tuple(row) for row in result.all()]
    except SQLAlchemyError:
        logger.exception("Failed to read recent %s", label)
        raise UpstreamReadFailure("recent activity")


async def recent_activity(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    now: datetime | None = None,
) -> list[ActivitySchema]:
    limit = settings.recent_activity_fetch_limit
    achievements_stmt = (
        select(User.name, Achievement.name, Achievement.date)
        .select_from(Achievement)
        .join(User, Achievement.user_id == User.id)
        .order_by(Achievement.date.desc())
        .limit(limit)
    )
    quizzes_stmt = (
        select(User.name, QuizScore.quiz_name, QuizScore.created_at)
        .select_from(QuizScore)
        .join(User, QuizScore.user_id == User.id)
        .order_by(QuizScore.created_at.desc())
        .limit(limit)
    )
    achievements, quizzes = await gather_all(
        [
            _read_rows(session_factory, "achievements", achievements_stmt),
            _read_rows(session_factory, "quiz completions", quizzes_stmt),
        ]
    )
    return merge_activity(achievements, quizzes, settings.recent_activity_size, now)
