"""Fan-out/fan-in read of every record set that belongs to one user."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learning_dashboard.core.errors import UpstreamReadFailure
from learning_dashboard.models.achievement import Achievement
from learning_dashboard.models.learning_path import LearningPathEntry
from learning_dashboard.models.quiz_score import QuizScore
from learning_dashboard.models.skill import SkillLearned, SkillMatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecords:
    quiz_scores: list[Any]
    skills_learned: list[Any]
    skill_matches: list[Any]
    learning_path: list[Any]
    achievements: list[Any]


def _queries(user_id: int) -> list[tuple[str, Any]]:
    """(label, statement) per record set; labels end up in the error body."""
    return [
        (
            "quiz scores",
            select(QuizScore).where(QuizScore.user_id == user_id).order_by(QuizScore.created_at.asc(), QuizScore.id),
        ),
        (
            "skills",
            select(SkillLearned).where(SkillLearned.user_id == user_id).order_by(SkillLearned.name, SkillLearned.id),
        ),
        (
            "skill matches",
            select(SkillMatch).where(SkillMatch.user_id == user_id).order_by(SkillMatch.skill_name, SkillMatch.id),
        ),
        (
            "learning path",
            select(LearningPathEntry)
            .where(LearningPathEntry.user_id == user_id)
            .order_by(LearningPathEntry.created_at.asc(), LearningPathEntry.id),
        ),
        (
            "achievements",
            select(Achievement).where(Achievement.user_id == user_id).order_by(Achievement.date.desc(), Achievement.id),
        ),
    ]


async def _read(session_factory: async_sessionmaker[AsyncSession], label: str, statement) -> list[Any]:
    # AsyncSession is not safe for concurrent use: one session per read
    try:
        async with session_factory() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())
    except SQLAlchemyError:
        logger.exception("Failed to read %s", label)
        raise UpstreamReadFailure(label)


async def gather_all(coros: list) -> list[Any]:
    """Run coroutines concurrently; on the first failure cancel the rest and re-raise it."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def fetch_user_records(session_factory: async_sessionmaker[AsyncSession], user_id: int) -> UserRecords:
    reads = [_read(session_factory, label, stmt) for label, stmt in _queries(user_id)]
    quiz_scores, skills, matches, path, achievements = await gather_all(reads)
    return UserRecords(
        quiz_scores=quiz_scores,
        skills_learned=skills,
        skill_matches=matches,
        learning_path=path,
        achievements=achievements,
    )
