"""Admin-only user directory."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_dashboard.core.config import Settings
from learning_dashboard.core.errors import UpstreamReadFailure
from learning_dashboard.models.user import User
from learning_dashboard.schemas.directory import DirectoryEntrySchema, DirectoryOutSchema
from learning_dashboard.services.access import resolve_caller

logger = logging.getLogger(__name__)

ADMIN_MESSAGE = "Admin access: You can view all users."
NOT_ADMIN_MESSAGE = "Only admins can view all users. Please enter your name to access your dashboard."


async def list_directory(session: AsyncSession, caller_name: str | None, settings: Settings) -> DirectoryOutSchema:
    """Everyone's name/email/role for admins; an empty list and a message for anyone else."""
    principal = await resolve_caller(session, caller_name, settings)
    if not principal.is_admin:
        return DirectoryOutSchema(users=[], is_admin=False, message=NOT_ADMIN_MESSAGE)

    try:
        result = await session.execute(select(User).order_by(User.name))
    except SQLAlchemyError:
        logger.exception("Error fetching users")
        raise UpstreamReadFailure("users")

    users = [DirectoryEntrySchema.model_validate(u) for u in result.scalars().all()]
    return DirectoryOutSchema(users=users, is_admin=True, message=ADMIN_MESSAGE)


async def available_users(session: AsyncSession) -> list[dict]:
    """[{name, role}] ordered by name, for 404 bodies. Empty if the read fails."""
    try:
        result = await session.execute(select(User.name, User.role).order_by(User.name))
    except SQLAlchemyError:
        logger.exception("Error fetching available users")
        return []
    return [{"name": name, "role": role} for name, role in result.all()]
