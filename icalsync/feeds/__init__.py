"""Published feeds: conditional caching, tokens, and serving."""

from icalsync.feeds.conditional import (
    CacheDecision,
    CacheValidators,
    compute_etag,
    compute_last_modified,
    evaluate,
)
from icalsync.feeds.publisher import FeedPublisher
from icalsync.feeds.tokens import FeedTokenManager

__all__ = [
    "CacheDecision",
    "CacheValidators",
    "FeedPublisher",
    "FeedTokenManager",
    "compute_etag",
    "compute_last_modified",
    "evaluate",
]
