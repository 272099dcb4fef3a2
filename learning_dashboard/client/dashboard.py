"""Headless dashboard client.

Talks to the API over httpx, keeps a SessionState, and falls back to demo
data on any failure without telling error kinds apart. While authenticated
it refreshes every `poll_interval` seconds from a single background task,
and it can follow the server's activity stream into an ActivityFeed.
"""
import asyncio
import json
import logging
from typing import Any

import httpx

from learning_dashboard.client.feed import ActivityFeed
from learning_dashboard.client.state import (
    FETCHING,
    SessionState,
    begin_login,
    begin_refresh,
    begin_view,
    logged_out,
    login_failed,
    login_succeeded,
    logout,
)

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 15.0


class DashboardFetchError(Exception):
    pass


def _error_message(response: httpx.Response) -> str:
    """Body `error`, else body `message`, else the HTTP status."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if message:
            return str(message)
    return f"HTTP {response.status_code}"


class DashboardClient:
    def __init__(self, http: httpx.AsyncClient, poll_interval: float = POLL_INTERVAL_SECONDS):
        self.http = http
        self.poll_interval = poll_interval
        self.state: SessionState = logged_out()
        self._poll_task: asyncio.Task | None = None
        self._follow_task: asyncio.Task | None = None
        # bumped on login, logout and profile switch so late responses are dropped
        self._generation = 0

    # ---------- session ----------

    async def login(self, name: str) -> SessionState:
        self.stop_polling()
        self._generation += 1
        self.state = begin_login(self.state, name)
        logger.info("User attempting to login: %s", self.state.current_user)
        await self._fetch(self._generation)
        if self.state.should_poll:
            self.start_polling()
        return self.state

    async def view_user(self, target: str) -> SessionState:
        """Show `target`'s dashboard as the signed-in caller (admins may view anyone).

        Polling carries on for the new target. A denied or unknown target is
        handled like any other failure.
        """
        if not self.state.is_authenticated:
            logger.warning("Ignoring profile switch to %r: not signed in", target)
            return self.state
        # responses still in flight for the previous target are dropped
        self._generation += 1
        self.state = begin_view(self.state, target)
        logger.info("%s switching to the dashboard of %s", self.state.current_user, self.state.target_user)
        await self._fetch(self._generation)
        return self.state

    async def refresh(self) -> SessionState:
        """Re-fetch the shown dashboard; no-op unless authenticated. Live data stays up meanwhile."""
        if not self.state.is_authenticated:
            return self.state
        self.state = begin_refresh(self.state)
        await self._fetch(self._generation)
        return self.state

    def logout(self) -> SessionState:
        self.stop_polling()
        self._generation += 1
        self.state = logout(self.state)
        logger.info("User logged out, showing demo data")
        return self.state

    async def _fetch(self, generation: int) -> None:
        caller, target = self.state.current_user, self.state.viewing
        params = {"user": target, "currentUser": caller}
        try:
            response = await self.http.get("/api/user-data", params=params, headers={"Cache-Control": "no-store"})
            if response.is_error:
                raise DashboardFetchError(_error_message(response))
            data = response.json()
        except (httpx.HTTPError, ValueError, DashboardFetchError) as exc:
            if generation != self._generation or self.state.status not in FETCHING:
                return
            logger.error("Error fetching data for %s: %s", target, exc)
            self.state = login_failed(self.state, str(exc) or type(exc).__name__)
            return

        if generation != self._generation:
            logger.debug("Dropping stale response for %s", target)
            return
        if self.state.status not in FETCHING:
            # a concurrent fetch already failed
            logger.debug("Dropping response for %s after %s", target, self.state.status.value)
            return
        self.state = login_succeeded(self.state, data)

    # ---------- polling ----------

    def start_polling(self) -> None:
        if self._poll_task is not None and not self._poll_task.done():
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    def stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is not None and not task.done():
            task.cancel()

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def _poll_loop(self) -> None:
        # each refresh is awaited before the next sleep, so ticks never overlap
        while self.state.should_poll:
            await asyncio.sleep(self.poll_interval)
            if not self.state.should_poll:
                break
            logger.info("Auto-refreshing data for user: %s", self.state.viewing)
            await self.refresh()

    async def aclose(self) -> None:
        tasks = [t for t in (self._poll_task, self._follow_task) if t is not None]
        self.stop_polling()
        self.stop_following()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ---------- side widgets ----------

    async def list_users(self) -> dict[str, Any] | None:
        """Directory for the profile picker; None if it could not be loaded."""
        try:
            response = await self.http.get("/api/users", params={"currentUser": self.state.current_user})
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching users: %s", exc)
            return None

    async def load_recent_activity(self, feed: ActivityFeed) -> bool:
        """Replace the feed with the server's list; keep what is there on failure."""
        try:
            response = await self.http.get("/api/recent-activity")
            response.raise_for_status()
            activities = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching recent activity: %s", exc)
            return False
        feed.replace(activities)
        return True

    # ---------- pushed activity ----------

    async def follow_activity(self, feed: ActivityFeed, limit: int | None = None) -> int:
        """Push events from /api/activity-stream into the feed until the stream ends.

        Returns how many events arrived. Connection errors end the stream quietly;
        the feed keeps whatever it already shows.
        """
        params = {"limit": limit} if limit else None
        received = 0
        try:
            async with self.http.stream("GET", "/api/activity-stream", params=params, timeout=None) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        event = json.loads(line[len("data:"):])
                    except ValueError:
                        logger.warning("Skipping malformed activity event: %r", line)
                        continue
                    feed.push_event(event)
                    received += 1
        except httpx.HTTPError as exc:
            logger.error("Activity stream ended: %s", exc)
        return received

    def start_following(self, feed: ActivityFeed) -> None:
        if self._follow_task is not None and not self._follow_task.done():
            return
        self._follow_task = asyncio.create_task(self.follow_activity(feed))

    def stop_following(self) -> None:
        task, self._follow_task = self._follow_task, None
        if task is not None and not task.done():
            task.cancel()
