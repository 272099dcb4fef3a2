"""Learning Dashboard - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from learning_dashboard.core.config import get_settings
from learning_dashboard.core.errors import DashboardError
from learning_dashboard.core.logging import setup_logging
from learning_dashboard.db.base import Base
from learning_dashboard.db.session import dispose_engines, get_engine
from learning_dashboard.routers import api
from learning_dashboard.services.notifications import ActivityBroker, create_change_watcher
from learning_dashboard.services.seeding import seed_demo_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    watcher = None

    if not settings.has_credentials:
        logger.warning("STORE_URL / STORE_SERVICE_KEY not set; data endpoints will return 500")
    else:
        if settings.create_tables or settings.seed_demo_data:
            engine = get_engine(settings)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            if settings.seed_demo_data:
                async with async_sessionmaker(engine, expire_on_commit=False)() as db:
                    await seed_demo_data(db)

        # the activity stream is best-effort: the rest of the API works without it
        candidate = create_change_watcher(settings, app.state.activity_broker)
        try:
            await candidate.start()
            watcher = candidate
        except (OSError, SQLAlchemyError, asyncpg.PostgresError):
            logger.exception("Insert notifications unavailable; /api/activity-stream will stay silent")

    yield

    if watcher is not None:
        await watcher.stop()
    await dispose_engines()


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s", request.url.path, exc_info=exc)
    fallback = DashboardError()
    return JSONResponse(status_code=fallback.status_code, content=fallback.to_payload())


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Learner records dashboard API",
        lifespan=lifespan,
    )
    app.state.activity_broker = ActivityBroker(settings.activity_stream_queue_size)
    app.add_exception_handler(DashboardError, dashboard_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.include_router(api.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
