from learning_dashboard.services.access import authorize, resolve_access, resolve_caller
from learning_dashboard.services.activity import parse_time_ago, recent_activity, time_ago
from learning_dashboard.services.aggregation import fetch_user_records
from learning_dashboard.services.directory import available_users, list_directory
from learning_dashboard.services.seeding import seed_demo_data
from learning_dashboard.services.shaping import shape_dashboard

__all__ = [
    "authorize",
    "available_users",
    "fetch_user_records",
    "list_directory",
    "parse_time_ago",
    "recent_activity",
    "resolve_access",
    "resolve_caller",
    "seed_demo_data",
    "shape_dashboard",
    "time_ago",
]
