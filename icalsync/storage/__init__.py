"""Storage layer for events, subscriptions, and feed tokens."""

from icalsync.storage.base import EventStore, FeedTokenStore, SubscriptionRegistry
from icalsync.storage.json_store import (
    JsonEventStore,
    JsonFeedTokenStore,
    JsonSubscriptionRegistry,
)
from icalsync.storage.memory import (
    MemoryEventStore,
    MemoryFeedTokenStore,
    MemorySubscriptionRegistry,
)

__all__ = [
    "EventStore",
    "FeedTokenStore",
    "SubscriptionRegistry",
    "JsonEventStore",
    "JsonFeedTokenStore",
    "JsonSubscriptionRegistry",
    "MemoryEventStore",
    "MemoryFeedTokenStore",
    "MemorySubscriptionRegistry",
]
