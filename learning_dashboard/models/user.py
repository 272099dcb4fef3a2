"""User model: one row per learner. Role decides what the caller may see."""
from sqlalchemy import Column, Integer, Numeric, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from learning_dashboard.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)  # looked up case-insensitively
    email = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")  # admin | user
    avatar_url = Column(String(512), nullable=True)
    resume_score = Column(Numeric(3, 1), nullable=False, default=0)  # 0-10
    xp_points = Column(Integer, nullable=False, default=0)  # 0-100
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    quiz_scores = relationship("QuizScore", back_populates="user")
    skills_learned = relationship("SkillLearned", back_populates="user")
    skill_matches = relationship("SkillMatch", back_populates="user")
    learning_path = relationship("LearningPathEntry", back_populates="user")
    achievements = relationship("Achievement", back_populates="user")
