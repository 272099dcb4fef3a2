"""API routes: JSON for user dashboard data, user directory, recent activity; SSE activity stream."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from learning_dashboard.core.config import Settings, get_settings
from learning_dashboard.core.errors import UpstreamReadFailure, UserNotFound
from learning_dashboard.db.session import get_db, get_session_factory
from learning_dashboard.schemas.activity import ActivitySchema
from learning_dashboard.schemas.dashboard import DashboardOutSchema
from learning_dashboard.schemas.directory import DirectoryOutSchema
from learning_dashboard.services.access import find_user_by_name, resolve_access
from learning_dashboard.services.activity import recent_activity
from learning_dashboard.services.aggregation import fetch_user_records
from learning_dashboard.services.directory import available_users, list_directory
from learning_dashboard.services.notifications import ActivityBroker
from learning_dashboard.services.shaping import shape_dashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/user-data", response_model=DashboardOutSchema)
async def get_user_data(
    settings: Annotated[Settings, Depends(get_settings)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    user: str | None = None,
    current_user: Annotated[str | None, Query(alias="currentUser")] = None,
):
    """Dashboard view model for `user`, as seen by `currentUser`."""
    logger.info("Fetching data for user %r requested by %r", user, current_user)

    async with session_factory() as db:
        decision = await resolve_access(db, current_user, user, settings)
        is_admin = decision.principal.is_admin

        try:
            target = await find_user_by_name(db, decision.target_name)
        except SQLAlchemyError:
            logger.exception("User lookup failed for %r", decision.target_name)
            raise UpstreamReadFailure("user")

        if target is None:
            logger.warning("User not found: %s", decision.target_name)
            users = await available_users(db) if is_admin else []
            raise UserNotFound(decision.target_name, is_admin=is_admin, available_users=users)

    logger.info("Fetching live data for user %s (role: %s)", target.name, target.role)
    records = await fetch_user_records(session_factory, target.id)
    view = shape_dashboard(target, records, is_admin, settings)

    logger.info(
        "Data summary for %s: quizScores=%d skillsLearned=%d skillMatches=%d learningPath=%d achievements=%d",
        view.name,
        len(view.quiz_scores),
        len(view.skills_learned),
        len(view.skill_matches),
        len(view.learning_path),
        len(view.achievements),
    )
    return view


@router.get("/users", response_model=DirectoryOutSchema)
async def get_users(
    settings: Annotated[Settings, Depends(get_settings)],
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[str | None, Query(alias="currentUser")] = None,
):
    """All users for admins; otherwise an empty list with an explanation (never an error)."""
    return await list_directory(db, current_user, settings)


@router.get("/recent-activity", response_model=list[ActivitySchema])
async def get_recent_activity(
    settings: Annotated[Settings, Depends(get_settings)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
):
    """Up to three latest achievements / quiz completions across all users."""
    return await recent_activity(session_factory, settings)


def get_activity_broker(request: Request) -> ActivityBroker:
    return request.app.state.activity_broker


@router.get("/activity-stream")
async def stream_activity(
    broker: Annotated[ActivityBroker, Depends(get_activity_broker)],
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    """Server-sent events, one `data:` line per new achievement / quiz row.

    Open-ended unless `limit` is given; the stream then closes after that many events.
    """
    queue = broker.subscribe()
    logger.info("Activity stream opened (%d subscriber(s))", broker.subscriber_count)

    async def events():
        sent = 0
        try:
            while limit is None or sent < limit:
                event = await queue.get()
                yield f"data: {event.model_dump_json()}\n\n"
                sent += 1
        finally:
            broker.unsubscribe(queue)
            logger.info("Activity stream closed after %d event(s)", sent)

    return StreamingResponse(events(), media_type="text/event-stream", headers={"Cache-Control": "no-store"})
