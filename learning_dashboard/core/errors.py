"""Error taxonomy for the access layer; every kind renders as a JSON body."""
from typing import Any


class DashboardError(Exception):
    status_code = 500
    error = "Database connection failed"

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error}


class AuthorizationDenied(DashboardError):
    """Caller is not allowed to view the target's data."""

    status_code = 403
    error = "Access denied"

    def __init__(self, caller: str, target: str):
        super().__init__(f"{caller!r} may not view {target!r}")
        self.caller = caller
        self.target = target

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "message": "You can only access your own dashboard data. Only admins can view other users.",
        }


class UserNotFound(DashboardError):
    """Target user has no row. Admin callers get the directory to pick from."""

    status_code = 404

    def __init__(self, name: str, is_admin: bool = False, available_users: list[dict] | None = None):
        super().__init__(name)
        self.name = name
        self.is_admin = is_admin
        self.available_users = available_users or []

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": f'User "{self.name}" not found in database',
            "isAdmin": self.is_admin,
            "availableUsers": self.available_users,
        }


class UpstreamReadFailure(DashboardError):
    """A store read failed; `read` names which one."""

    def __init__(self, read: str):
        super().__init__(read)
        self.read = read

    def to_payload(self) -> dict[str, Any]:
        return {"error": f"Failed to fetch {self.read}"}


class ConfigurationMissing(DashboardError):
    error = "Missing database credentials"
