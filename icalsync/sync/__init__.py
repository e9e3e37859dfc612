"""Subscription sync: fetching, reconciliation, and scheduling."""

from icalsync.sync.fetcher import FeedFetcher, normalize_feed_url
from icalsync.sync.locks import SubscriptionLocks
from icalsync.sync.reconciler import ReconciliationEngine
from icalsync.sync.scheduler import SyncScheduler

__all__ = [
    "FeedFetcher",
    "ReconciliationEngine",
    "SubscriptionLocks",
    "SyncScheduler",
    "normalize_feed_url",
]
