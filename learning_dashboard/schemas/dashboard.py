"""Pydantic schemas for the dashboard view model (camelCase on the wire)."""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SkillLearnedSchema(CamelModel):
    name: str
    level: int
    completed: bool


class LearningPathSchema(CamelModel):
    month: str
    progress: int


class AchievementSchema(CamelModel):
    name: str
    date: str  # display label, e.g. "Jan 15"


class DashboardOutSchema(CamelModel):
    name: str
    email: str
    role: str
    avatar: str
    resume_score: float
    xp_points: int
    is_admin: bool  # the caller's elevation, not the target's
    quiz_scores: list[float]
    quiz_names: list[str]
    skill_matches: dict[str, int]
    skills_learned: list[SkillLearnedSchema]
    learning_path: list[LearningPathSchema]
    achievements: list[AchievementSchema]
