from learning_dashboard.models.user import User
from learning_dashboard.models.quiz_score import QuizScore
from learning_dashboard.models.skill import SkillLearned, SkillMatch
from learning_dashboard.models.learning_path import LearningPathEntry
from learning_dashboard.models.achievement import Achievement

__all__ = ["User", "QuizScore", "SkillLearned", "SkillMatch", "LearningPathEntry", "Achievement"]
