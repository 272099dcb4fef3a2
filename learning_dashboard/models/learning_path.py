"""LearningPathEntry model: monthly progress point."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from learning_dashboard.db.session import Base


class LearningPathEntry(Base):
    __tablename__ = "learning_path"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    month = Column(String(16), nullable=False)  # display label, e.g. "Jan"
    progress = Column(Integer, nullable=False, default=0)  # 0-100
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="learning_path")
