"""Caller identity, role resolution, and the target-user authorization rule."""
import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_dashboard.core.config import Settings
from learning_dashboard.core.errors import AuthorizationDenied, UpstreamReadFailure
from learning_dashboard.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Who is asking. `name` is None for the anonymous/demo principal."""

    name: str | None
    is_admin: bool = False

    @property
    def is_anonymous(self) -> bool:
        return self.name is None


ANONYMOUS = Principal(name=None, is_admin=False)


@dataclass(frozen=True)
class AccessDecision:
    principal: Principal
    target_name: str
    used_demo_target: bool = False


def _clean(name: str | None) -> str | None:
    """Blank query values count as absent."""
    if name is None:
        return None
    name = name.strip()
    return name or None


async def find_user_by_name(session: AsyncSession, name: str) -> User | None:
    """Case-insensitive exact name match; first row by id if names collide."""
    result = await session.execute(
        select(User).where(func.lower(User.name) == name.lower()).order_by(User.id).limit(1)
    )
    return result.scalars().first()


async def resolve_caller(session: AsyncSession, caller_name: str | None, settings: Settings) -> Principal:
    caller_name = _clean(caller_name)
    if caller_name is None:
        return ANONYMOUS

    try:
        user = await find_user_by_name(session, caller_name)
    except SQLAlchemyError:
        logger.exception("Caller role lookup failed for %r", caller_name)
        raise UpstreamReadFailure("caller role")

    is_admin = user is not None and user.role == settings.admin_role
    logger.info("User %s is admin: %s", caller_name, is_admin)
    return Principal(name=caller_name, is_admin=is_admin)


def resolve_target_name(caller_name: str | None, target_name: str | None, settings: Settings) -> tuple[str, bool]:
    """Return (target, used_demo_target): target, else caller, else the demo user."""
    target_name = _clean(target_name)
    if target_name:
        return target_name, False
    caller_name = _clean(caller_name)
    if caller_name:
        return caller_name, False
    return settings.demo_user_name, True


def authorize(principal: Principal, target_name: str) -> None:
    """Non-admins may only see their own data. Anonymous callers are not checked."""
    if principal.is_admin or principal.is_anonymous:
        return
    if target_name.lower() != principal.name.lower():
        logger.warning("Access denied: %s requested %s", principal.name, target_name)
        raise AuthorizationDenied(principal.name, target_name)


async def resolve_access(
    session: AsyncSession,
    caller_name: str | None,
    target_name: str | None,
    settings: Settings,
) -> AccessDecision:
    principal = await resolve_caller(session, caller_name, settings)
    target, used_demo = resolve_target_name(principal.name, target_name, settings)
    if used_demo:
        logger.info("No caller or target given, using demo user %s", target)
    authorize(principal, target)
    return AccessDecision(principal=principal, target_name=target, used_demo_target=used_demo)
