from learning_dashboard.schemas.activity import ActivityEventSchema, ActivitySchema
from learning_dashboard.schemas.dashboard import (
    AchievementSchema,
    DashboardOutSchema,
    LearningPathSchema,
    SkillLearnedSchema,
)
from learning_dashboard.schemas.directory import DirectoryEntrySchema, DirectoryOutSchema

__all__ = [
    "AchievementSchema",
    "ActivityEventSchema",
    "ActivitySchema",
    "DashboardOutSchema",
    "DirectoryEntrySchema",
    "DirectoryOutSchema",
    "LearningPathSchema",
    "SkillLearnedSchema",
]
