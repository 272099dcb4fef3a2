"""Pydantic schemas for the admin user directory."""
from pydantic import BaseModel

from learning_dashboard.schemas.dashboard import CamelModel


class DirectoryEntrySchema(BaseModel):
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class DirectoryOutSchema(CamelModel):
    users: list[DirectoryEntrySchema]
    is_admin: bool
    message: str
