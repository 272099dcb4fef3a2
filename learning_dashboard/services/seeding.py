"""Seed a small demo data set for local runs (only when the users table is empty)."""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_dashboard.models.achievement import Achievement
from learning_dashboard.models.learning_path import LearningPathEntry
from learning_dashboard.models.quiz_score import QuizScore
from learning_dashboard.models.skill import SkillLearned, SkillMatch
from learning_dashboard.models.user import User

logger = logging.getLogger(__name__)

# name, email, role, resume_score, xp_points
DEMO_USERS = [
    ("admin", "admin@example.com", "admin", 9.0, 95),
    ("yeswanth", "yeswanth@example.com", "user", 7.5, 65),
    ("priya", "priya@example.com", "user", 8.2, 72),
]

DEMO_QUIZZES = [
    ("JavaScript Basics", "7.2"),
    ("React Fundamentals", "8.5"),
    ("Node.js Intro", "9.0"),
    ("Database Design", "8.7"),
]

DEMO_SKILLS = [
    ("JavaScript", 75, True),
    ("React", 65, True),
    ("Node.js", 55, False),
    ("Python", 50, False),
]

DEMO_PATH = [("Jan", 10), ("Feb", 25), ("Mar", 40), ("Apr", 55)]

DEMO_ACHIEVEMENTS = ["First Login", "Profile Setup", "First Quiz"]


async def seed_demo_data(db: AsyncSession) -> int:
    """Insert demo users and their records. Returns the number of users added."""
    count = (await db.execute(select(func.count(User.id)))).scalar_one()
    if count:
        logger.info("Users table not empty (%d rows), skipping demo seed", count)
        return 0

    now = datetime.now(timezone.utc)
    for name, email, role, resume_score, xp in DEMO_USERS:
        user = User(name=name, email=email, role=role, resume_score=resume_score, xp_points=xp)
        db.add(user)
        await db.flush()

        for i, (quiz_name, score) in enumerate(DEMO_QUIZZES):
            db.add(
                QuizScore(
                    user_id=user.id,
                    quiz_name=quiz_name,
                    score=score,
                    created_at=now - timedelta(days=len(DEMO_QUIZZES) - i),
                )
            )
        for skill_name, level, completed in DEMO_SKILLS:
            db.add(SkillLearned(user_id=user.id, name=skill_name, level=level, completed=completed))
            db.add(SkillMatch(user_id=user.id, skill_name=skill_name, match_percentage=level))
        for i, (month, progress) in enumerate(DEMO_PATH):
            db.add(
                LearningPathEntry(
                    user_id=user.id,
                    month=month,
                    progress=progress,
                    created_at=now - timedelta(days=30 * (len(DEMO_PATH) - i)),
                )
            )
        for i, achievement in enumerate(DEMO_ACHIEVEMENTS):
            db.add(Achievement(user_id=user.id, name=achievement, date=now - timedelta(hours=6 * (i + 1))))

    await db.commit()
    logger.info("Seeded %d demo users", len(DEMO_USERS))
    return len(DEMO_USERS)
