"""Async engine / session factory for the store. Built lazily from settings."""
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from learning_dashboard.core.config import Settings, get_settings
from learning_dashboard.core.errors import ConfigurationMissing


class Base(DeclarativeBase):
    pass


# one engine per store URL for the life of the process
_engines: dict[str, AsyncEngine] = {}


def get_engine(settings: Settings) -> AsyncEngine:
    if not settings.has_credentials:
        raise ConfigurationMissing()

    url = settings.store_url_with_key()
    engine = _engines.get(url)
    if engine is None:
        engine = create_async_engine(url, echo=settings.debug, pool_pre_ping=True)
        _engines[url] = engine
    return engine


async def dispose_engines() -> None:
    for engine in list(_engines.values()):
        await engine.dispose()
    _engines.clear()


def get_session_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> async_sessionmaker[AsyncSession]:
    """Session factory; concurrent reads each open their own session from it."""
    return async_sessionmaker(get_engine(settings), expire_on_commit=False)


async def get_db(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
):
    async with session_factory() as session:
        yield session
