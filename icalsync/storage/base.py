"""Store protocols for events, subscriptions, and feed tokens."""

from typing import Iterable, Protocol

from icalsync.models.event import CalendarEvent
from icalsync.models.feed_token import FeedToken
from icalsync.models.subscription import Subscription


class EventStore(Protocol):
    """Protocol for event persistence."""

    def get(self, event_id: str) -> CalendarEvent | None:
        """Get event by internal id."""
        ...

    def list_for_owner(self, owner_id: str) -> list[CalendarEvent]:
        """All events of an owner, ordered by start time."""
        ...

    def list_for_subscription(
        self, owner_id: str, subscription_id: str
    ) -> list[CalendarEvent]:
        """Events of an owner that came from one subscription."""
        ...

    def find_by_key(
        self, owner_id: str, subscription_id: str, external_uid: str
    ) -> CalendarEvent | None:
        """Look up the event identified by the reconciliation key."""
        ...

    def has_external_uid(self, owner_id: str, external_uid: str) -> bool:
        """True if any event of the owner carries this feed UID."""
        ...

    def insert(self, event: CalendarEvent) -> CalendarEvent:
        ...

    def update(self, event_id: str, changes: dict) -> CalendarEvent:
        ...

    def delete(self, event_id: str) -> None:
        ...

    def apply(
        self,
        inserts: Iterable[CalendarEvent] = (),
        updates: Iterable[tuple[str, dict]] = (),
        deletes: Iterable[str] = (),
    ) -> None:
        """Apply a batch of changes in one write."""
        ...

    def delete_for_subscription(self, owner_id: str, subscription_id: str) -> int:
        """Delete every event of a subscription; returns the count."""
        ...


class SubscriptionRegistry(Protocol):
    """Protocol for subscription persistence."""

    def get(self, subscription_id: str) -> Subscription | None:
        ...

    def list_for_owner(self, owner_id: str) -> list[Subscription]:
        ...

    def list_all(self) -> list[Subscription]:
        ...

    def list_due(self, now: int) -> list[Subscription]:
        """Subscriptions with auto-sync on whose interval has elapsed."""
        ...

    def find_by_url(self, owner_id: str, remote_url: str) -> Subscription | None:
        ...

    def insert(self, subscription: Subscription) -> Subscription:
        ...

    def update(self, subscription_id: str, changes: dict) -> Subscription:
        ...

    def delete(self, subscription_id: str) -> None:
        ...


class FeedTokenStore(Protocol):
    """Protocol for feed token persistence."""

    def get(self, token_id: str) -> FeedToken | None:
        ...

    def get_by_token(self, token: str) -> FeedToken | None:
        ...

    def list_for_owner(self, owner_id: str) -> list[FeedToken]:
        ...

    def insert(self, feed_token: FeedToken) -> FeedToken:
        ...

    def update(self, token_id: str, changes: dict) -> FeedToken:
        ...

    def increment_access(self, token_id: str, now: int) -> FeedToken:
        """Bump access_count and set last_accessed_at in one locked step."""
        ...

    def delete(self, token_id: str) -> None:
        ...
