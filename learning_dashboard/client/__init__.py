from learning_dashboard.client.dashboard import DashboardClient
from learning_dashboard.client.feed import ActivityFeed
from learning_dashboard.client.state import SessionState, SessionStatus

__all__ = ["ActivityFeed", "DashboardClient", "SessionState", "SessionStatus"]
