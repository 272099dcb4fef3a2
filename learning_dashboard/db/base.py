"""SQLAlchemy declarative base and model imports for Alembic."""
from learning_dashboard.db.session import Base

# Import all models so Alembic can see them
from learning_dashboard.models.achievement import Achievement  # noqa: F401
from learning_dashboard.models.learning_path import LearningPathEntry  # noqa: F401
from learning_dashboard.models.quiz_score import QuizScore  # noqa: F401
from learning_dashboard.models.skill import SkillLearned, SkillMatch  # noqa: F401
from learning_dashboard.models.user import User  # noqa: F401

__all__ = ["Base", "User", "QuizScore", "SkillLearned", "SkillMatch", "LearningPathEntry", "Achievement"]
