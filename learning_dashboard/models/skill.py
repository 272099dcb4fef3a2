"""Skill models: skills a user has learned, and how well they match target skills."""
from sqlalchemy import Column, Integer, Boolean, String, ForeignKey
from sqlalchemy.orm import relationship

from learning_dashboard.db.session import Base


class SkillLearned(Base):
    __tablename__ = "skills_learned"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)
    level = Column(Integer, nullable=False, default=0)  # 0-100
    completed = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="skills_learned")


class SkillMatch(Base):
    __tablename__ = "skill_matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # no unique (user_id, skill_name): duplicates are collapsed when shaping
    skill_name = Column(String(128), nullable=False)
    match_percentage = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="skill_matches")
