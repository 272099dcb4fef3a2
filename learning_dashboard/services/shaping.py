"""Turn a user row plus its record sets into the flat dashboard view model."""
from datetime import datetime
from typing import Any, Iterable

from learning_dashboard.core.config import Settings
from learning_dashboard.schemas.dashboard import (
    AchievementSchema,
    DashboardOutSchema,
    LearningPathSchema,
    SkillLearnedSchema,
)
from learning_dashboard.services.aggregation import UserRecords


def to_number(value: Any) -> float:
    """Store numerics may come back as Decimal or text; None counts as 0."""
    if value is None:
        return 0.0
    return float(value)


def collapse_skill_matches(rows: Iterable[Any]) -> dict[str, int]:
    """skill_name -> percentage. Later rows overwrite earlier duplicates."""
    matches: dict[str, int] = {}
    for row in rows:
        matches[row.skill_name] = row.match_percentage
    return matches


def format_achievement_date(value: datetime) -> str:
    """Short display date, e.g. "Jan 15"."""
    return f"{value.strftime('%b')} {value.day}"


def shape_dashboard(user: Any, records: UserRecords, is_admin: bool, settings: Settings) -> DashboardOutSchema:
    return DashboardOutSchema(
        name=user.name,
        email=user.email,
        role=user.role,
        avatar=user.avatar_url or settings.default_avatar,
        resume_score=to_number(user.resume_score),
        xp_points=user.xp_points or 0,
        is_admin=is_admin,
        quiz_scores=[to_number(q.score) for q in records.quiz_scores],
        quiz_names=[q.quiz_name for q in records.quiz_scores],
        skill_matches=collapse_skill_matches(records.skill_matches),
        skills_learned=[
            SkillLearnedSchema(name=s.name, level=s.level, completed=bool(s.completed))
            for s in records.skills_learned
        ],
        learning_path=[LearningPathSchema(month=p.month, progress=p.progress) for p in records.learning_path],
        achievements=[
            AchievementSchema(name=a.name, date=format_achievement_date(a.date)) for a in records.achievements
        ],
    )
