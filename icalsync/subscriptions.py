"""Subscription management scoped to the owning user."""

import logging
from urllib.parse import urlparse

from icalsync.exceptions import DuplicateSubscriptionError, NotFoundError, ValidationError
from icalsync.models.subscription import Subscription
from icalsync.storage.base import EventStore, SubscriptionRegistry
from icalsync.sync.locks import SubscriptionLocks
from icalsync.utils import Clock, build_record, now_ms

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https", "webcal", "webcals")
EDITABLE_FIELDS = (
    "remote_url",
    "display_name",
    "color",
    "auto_sync_enabled",
    "sync_interval_minutes",
)


def validate_feed_url(url: str) -> str:
    """Strip and check a feed URL.

    Raises:
        ValidationError: If the URL is not an absolute http(s)/webcal URL
    """
    url = url.strip() if isinstance(url, str) else ""
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        raise ValidationError(f"Invalid feed URL: {url!r}")
    return url


class SubscriptionManager:
    """Creates, edits, and removes a user's feed subscriptions."""

    def __init__(
        self,
        subscriptions: SubscriptionRegistry,
        events: EventStore,
        default_interval_minutes: int = 60,
        clock: Clock = now_ms,
        locks: SubscriptionLocks | None = None,
    ):
        self.subscriptions = subscriptions
        self.events = events
        self.default_interval_minutes = default_interval_minutes
        self.clock = clock
        # Shared with the reconciliation engine so removal waits out a running sync
        self.locks = locks or SubscriptionLocks()

    def get(self, owner_id: str, subscription_id: str) -> Subscription:
        """Get an owner's subscription.

        Raises:
            NotFoundError: If absent or owned by someone else
        """
        sub = self.subscriptions.get(subscription_id)
        if sub is None or sub.owner_id != owner_id:
            raise NotFoundError("Subscription not found")
        return sub

    def create(
        self,
        owner_id: str,
        remote_url: str,
        display_name: str | None = None,
        color: str | None = None,
        auto_sync_enabled: bool = True,
        sync_interval_minutes: int | None = None,
    ) -> Subscription:
        """
        Subscribe to a remote feed.

        Raises:
            ValidationError: On a bad URL or interval
            DuplicateSubscriptionError: If the owner already subscribes to the URL
        """
        remote_url = validate_feed_url(remote_url)
        if self.subscriptions.find_by_url(owner_id, remote_url) is not None:
            raise DuplicateSubscriptionError("A subscription with this URL already exists")

        if isinstance(display_name, str):
            display_name = display_name.strip()
        fields = {
            "owner_id": owner_id,
            "remote_url": remote_url,
            "display_name": display_name or urlparse(remote_url).netloc,
            "auto_sync_enabled": auto_sync_enabled,
            "sync_interval_minutes": self._check_interval(
                self.default_interval_minutes
                if sync_interval_minutes is None
                else sync_interval_minutes
            ),
            "created_at": self.clock(),
        }
        if color:
            fields["color"] = color
        sub = self.subscriptions.insert(build_record(Subscription, fields))
        logger.info(f"Created subscription '{sub.display_name}' ({sub.id}) -> {remote_url}")
        return sub

    def update(self, owner_id: str, subscription_id: str, **changes) -> Subscription:
        """
        Edit user-owned fields of a subscription.

        Changing the URL drops the cached validators of the old feed.

        Raises:
            NotFoundError: If absent or owned by someone else
            ValidationError: On unknown fields or bad values
        """
        sub = self.get(owner_id, subscription_id)
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        updates = {key: value for key, value in changes.items() if value is not None}
        if "sync_interval_minutes" in updates:
            updates["sync_interval_minutes"] = self._check_interval(updates["sync_interval_minutes"])
        if "display_name" in updates and not str(updates["display_name"]).strip():
            raise ValidationError("Display name cannot be empty")
        if "remote_url" in updates:
            url = validate_feed_url(updates["remote_url"])
            updates["remote_url"] = url
            if url != sub.remote_url:
                if self.subscriptions.find_by_url(owner_id, url) is not None:
                    raise DuplicateSubscriptionError(
                        "A subscription with this URL already exists"
                    )
                updates["cached_etag"] = None
                updates["cached_last_modified"] = None

        if not updates:
            return sub
        logger.info(f"Updated subscription {subscription_id}: {sorted(updates)}")
        return self.subscriptions.update(subscription_id, updates)

    def delete(self, owner_id: str, subscription_id: str) -> int:
        """Delete a subscription and every event it brought in.

        Returns:
            Number of events removed
        """
        self.get(owner_id, subscription_id)
        with self.locks.get(subscription_id):
            self.subscriptions.delete(subscription_id)
            removed = self.events.delete_for_subscription(owner_id, subscription_id)
        self.locks.discard(subscription_id)
        logger.info(f"Deleted subscription {subscription_id} and {removed} events")
        return removed

    def _check_interval(self, minutes: int) -> int:
        try:
            minutes = int(minutes)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid sync interval: {minutes!r}")
        if minutes < 1:
            raise ValidationError("Sync interval must be at least 1 minute")
        return minutes

    def list(self, owner_id: str) -> list[Subscription]:
        return self.subscriptions.list_for_owner(owner_id)
