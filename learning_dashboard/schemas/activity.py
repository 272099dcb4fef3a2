"""Pydantic schemas for recent-activity entries and pushed insert events."""
from pydantic import BaseModel


class ActivitySchema(BaseModel):
    name: str
    action: str
    time: str


class ActivityEventSchema(ActivitySchema):
    """One new achievement / quiz row, as streamed to clients."""

    time: str = "just now"
    table: str
    row_id: int | None = None  # stable key if the feed ever needs deduplication
