"""Application configuration from environment."""
from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Learning Dashboard"
    debug: bool = False
    log_level: str = "INFO"

    # Store (both required; see has_credentials)
    store_url: str | None = None
    store_service_key: str | None = None

    # Startup helpers for local runs
    create_tables: bool = False
    seed_demo_data: bool = False

    # Access rules
    admin_role: str = "admin"
    demo_user_name: str = "yeswanth"  # target when neither caller nor target is given

    # View model
    default_avatar: str = "/placeholder.svg?height=80&width=80"

    # Recent activity widget
    recent_activity_fetch_limit: int = 5  # per source table
    recent_activity_size: int = 3

    # Insert notifications (/api/activity-stream)
    activity_channel: str = "activity_inserts"  # Postgres NOTIFY channel, see alembic 002
    activity_watch_interval: float = 2.0  # seconds, non-Postgres stores
    activity_stream_queue_size: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def has_credentials(self) -> bool:
        return bool(self.store_url) and bool(self.store_service_key)

    def store_url_with_key(self) -> str:
        """Store URL with the service key filled in as the password of a named user."""
        url = make_url(self.store_url)
        if url.username and not url.password:
            url = url.set(password=self.store_service_key)
        return url.render_as_string(hide_password=False)


def get_settings() -> Settings:
    return Settings()
