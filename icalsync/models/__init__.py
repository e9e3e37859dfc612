"""Pydantic models for calendar sync."""

from icalsync.models.event import MUTABLE_FIELDS, CalendarEvent, ParsedEvent
from icalsync.models.feed_token import FeedToken
from icalsync.models.subscription import Subscription, SyncCounts
from icalsync.models.sync import (
    FeedResponse,
    FetchResult,
    ImportResult,
    SyncResult,
    SyncState,
)

__all__ = [
    "MUTABLE_FIELDS",
    "CalendarEvent",
    "ParsedEvent",
    "FeedToken",
    "Subscription",
    "SyncCounts",
    "FeedResponse",
    "FetchResult",
    "ImportResult",
    "SyncResult",
    "SyncState",
]
