"""Dashboard session state as an immutable value with explicit transitions.

    logged_out -> authenticating -> authenticated | auth_error

Any state may go back to logged_out. Only `authenticated` shows live data;
every other state shows the demo data set. Refreshes and profile switches
happen inside `authenticated` with `refreshing` set, so the live data stays
on screen until the new response lands.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from learning_dashboard.client.demo import DEMO_DASHBOARD


class SessionStatus(str, Enum):
    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    AUTH_ERROR = "auth_error"


class InvalidTransition(Exception):
    pass


DEMO_DATA: Mapping[str, Any] = MappingProxyType(DEMO_DASHBOARD)

# states a fetch result may land in
FETCHING = (SessionStatus.AUTHENTICATING, SessionStatus.AUTHENTICATED)


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus = SessionStatus.LOGGED_OUT
    current_user: str = ""  # who is signed in (sent as currentUser)
    target_user: str = ""  # whose dashboard is shown (sent as user)
    data: Mapping[str, Any] = field(default_factory=lambda: DEMO_DATA)
    is_admin: bool = False
    error: str | None = None
    auto_refresh: bool = False
    refreshing: bool = False
    last_updated: datetime | None = None

    @property
    def viewing(self) -> str:
        return self.target_user or self.current_user

    @property
    def is_demo(self) -> bool:
        return self.status is not SessionStatus.AUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def should_poll(self) -> bool:
        return self.is_authenticated and self.auto_refresh and bool(self.current_user)


def logged_out() -> SessionState:
    return SessionState()


def _required_name(name: str, what: str) -> str:
    name = name.strip()
    if not name:
        raise InvalidTransition(f"{what} needs a user name")
    return name


def begin_login(state: SessionState, name: str) -> SessionState:
    """Sign in as `name`, viewing their own dashboard."""
    name = _required_name(name, "login")
    return replace(
        state,
        status=SessionStatus.AUTHENTICATING,
        current_user=name,
        target_user=name,
        error=None,
        refreshing=False,
    )


def begin_refresh(state: SessionState) -> SessionState:
    if state.status is not SessionStatus.AUTHENTICATED:
        raise InvalidTransition(f"cannot refresh in state {state.status.value}")
    return replace(state, refreshing=True)


def begin_view(state: SessionState, target: str) -> SessionState:
    """Switch the shown dashboard to `target`; the signed-in caller stays the same."""
    if state.status is not SessionStatus.AUTHENTICATED:
        raise InvalidTransition(f"cannot switch profile in state {state.status.value}")
    return replace(state, target_user=_required_name(target, "profile switch"), refreshing=True)


def login_succeeded(state: SessionState, data: Mapping[str, Any], now: datetime | None = None) -> SessionState:
    """Live data arrived, for a login or for a refresh / profile switch."""
    if state.status not in FETCHING:
        raise InvalidTransition(f"cannot accept data in state {state.status.value}")
    return replace(
        state,
        status=SessionStatus.AUTHENTICATED,
        data=MappingProxyType(dict(data)),
        is_admin=bool(data.get("isAdmin", False)),
        error=None,
        auto_refresh=True,
        refreshing=False,
        last_updated=now or datetime.now(timezone.utc),
    )


def login_failed(state: SessionState, message: str) -> SessionState:
    """Any failure: keep the attempted names, show demo data, stop refreshing."""
    if state.status not in FETCHING:
        raise InvalidTransition(f"cannot fail from state {state.status.value}")
    return replace(
        state,
        status=SessionStatus.AUTH_ERROR,
        data=DEMO_DATA,
        is_admin=False,
        error=message,
        auto_refresh=False,
        refreshing=False,
    )


def logout(state: SessionState) -> SessionState:
    return logged_out()
