"""Thread-safe in-memory stores."""

import threading
from typing import Iterable

from icalsync.exceptions import DuplicateEventError, NotFoundError
from icalsync.models.event import CalendarEvent
from icalsync.models.feed_token import FeedToken
from icalsync.models.subscription import Subscription
from icalsync.utils import ModelT, build_record


def merge_changes(record: ModelT, changes: dict) -> ModelT:
    """Apply changes to a copy of record, validating the result."""
    return build_record(type(record), {**record.model_dump(), **changes})


class _MemoryStore:
    """Shared lock and commit hook for the in-memory stores.

    Records are copied on the way in and out so callers never hold a
    reference to stored state.
    """

    def __init__(self):
        self._lock = threading.RLock()

    def _commit(self) -> None:
        """Called after every mutation while the lock is held."""


class MemoryEventStore(_MemoryStore):
    """In-memory event store."""

    def __init__(self, events: Iterable[CalendarEvent] = ()):
        super().__init__()
        self._events: dict[str, CalendarEvent] = {
            event.id: event.model_copy(deep=True) for event in events
        }

    def get(self, event_id: str) -> CalendarEvent | None:
        with self._lock:
            event = self._events.get(event_id)
            return event.model_copy(deep=True) if event else None

    def list_for_owner(self, owner_id: str) -> list[CalendarEvent]:
        with self._lock:
            events = [
                event.model_copy(deep=True)
                for event in self._events.values()
                if event.owner_id == owner_id
            ]
        return sorted(events, key=lambda e: (e.start_time, e.id))

    def list_for_subscription(
        self, owner_id: str, subscription_id: str
    ) -> list[CalendarEvent]:
        return [
            event
            for event in self.list_for_owner(owner_id)
            if event.source_subscription_id == subscription_id
        ]

    def find_by_key(
        self, owner_id: str, subscription_id: str, external_uid: str
    ) -> CalendarEvent | None:
        with self._lock:
            for event in self._events.values():
                if (
                    event.owner_id == owner_id
                    and event.source_subscription_id == subscription_id
                    and event.external_uid == external_uid
                ):
                    return event.model_copy(deep=True)
        return None

    def has_external_uid(self, owner_id: str, external_uid: str) -> bool:
        with self._lock:
            return any(
                event.owner_id == owner_id and event.external_uid == external_uid
                for event in self._events.values()
            )

    def insert(self, event: CalendarEvent) -> CalendarEvent:
        self.apply(inserts=[event])
        return event.model_copy(deep=True)

    def update(self, event_id: str, changes: dict) -> CalendarEvent:
        self.apply(updates=[(event_id, changes)])
        return self.get(event_id)

    def delete(self, event_id: str) -> None:
        self.apply(deletes=[event_id])

    def apply(
        self,
        inserts: Iterable[CalendarEvent] = (),
        updates: Iterable[tuple[str, dict]] = (),
        deletes: Iterable[str] = (),
    ) -> None:
        """Commit a batch of changes atomically.

        Raises:
            NotFoundError: If an updated or deleted event does not exist
            ValidationError: If an update produces an invalid event
            DuplicateEventError: If the batch would store two events with the
                same (owner, subscription, external UID) key
        """
        with self._lock:
            staged = dict(self._events)
            for event in inserts:
                staged[event.id] = event.model_copy(deep=True)
            for event_id, changes in updates:
                if event_id not in staged:
                    raise NotFoundError(f"Event not found: {event_id}")
                staged[event_id] = merge_changes(staged[event_id], changes)
            for event_id in deletes:
                if staged.pop(event_id, None) is None:
                    raise NotFoundError(f"Event not found: {event_id}")

            self._check_keys(staged.values())
            self._events = staged
            self._commit()

    @staticmethod
    def _check_keys(events: Iterable[CalendarEvent]) -> None:
        seen = set()
        for event in events:
            if event.source_subscription_id is None or event.external_uid is None:
                continue
            key = (event.owner_id, event.source_subscription_id, event.external_uid)
            if key in seen:
                raise DuplicateEventError(
                    f"Event {event.external_uid} already exists in subscription "
                    f"{event.source_subscription_id}"
                )
            seen.add(key)

    def delete_for_subscription(self, owner_id: str, subscription_id: str) -> int:
        with self._lock:
            doomed = [
                event.id
                for event in self._events.values()
                if event.owner_id == owner_id
                and event.source_subscription_id == subscription_id
            ]
            if doomed:
                self.apply(deletes=doomed)
            return len(doomed)


class MemorySubscriptionRegistry(_MemoryStore):
    """In-memory subscription registry."""

    def __init__(self, subscriptions: Iterable[Subscription] = ()):
        super().__init__()
        self._subscriptions: dict[str, Subscription] = {
            sub.id: sub.model_copy(deep=True) for sub in subscriptions
        }

    def get(self, subscription_id: str) -> Subscription | None:
        with self._lock:
            sub = self._subscriptions.get(subscription_id)
            return sub.model_copy(deep=True) if sub else None

    def list_all(self) -> list[Subscription]:
        with self._lock:
            subs = [sub.model_copy(deep=True) for sub in self._subscriptions.values()]
        return sorted(subs, key=lambda s: (s.created_at, s.id))

    def list_for_owner(self, owner_id: str) -> list[Subscription]:
        return [sub for sub in self.list_all() if sub.owner_id == owner_id]

    def list_due(self, now: int) -> list[Subscription]:
        return [sub for sub in self.list_all() if sub.is_due(now)]

    def find_by_url(self, owner_id: str, remote_url: str) -> Subscription | None:
        for sub in self.list_for_owner(owner_id):
            if sub.remote_url == remote_url:
                return sub
        return None

    def insert(self, subscription: Subscription) -> Subscription:
        with self._lock:
            self._subscriptions[subscription.id] = subscription.model_copy(deep=True)
            self._commit()
        return subscription.model_copy(deep=True)

    def update(self, subscription_id: str, changes: dict) -> Subscription:
        with self._lock:
            sub = self._subscriptions.get(subscription_id)
            if sub is None:
                raise NotFoundError(f"Subscription not found: {subscription_id}")
            updated = merge_changes(sub, changes)
            self._subscriptions[subscription_id] = updated
            self._commit()
            return updated.model_copy(deep=True)

    def delete(self, subscription_id: str) -> None:
        with self._lock:
            if self._subscriptions.pop(subscription_id, None) is None:
                raise NotFoundError(f"Subscription not found: {subscription_id}")
            self._commit()


class MemoryFeedTokenStore(_MemoryStore):
    """In-memory feed token store."""

    def __init__(self, tokens: Iterable[FeedToken] = ()):
        super().__init__()
        self._tokens: dict[str, FeedToken] = {
            token.id: token.model_copy(deep=True) for token in tokens
        }

    def get(self, token_id: str) -> FeedToken | None:
        with self._lock:
            token = self._tokens.get(token_id)
            return token.model_copy(deep=True) if token else None

    def get_by_token(self, token: str) -> FeedToken | None:
        with self._lock:
            for record in self._tokens.values():
                if record.token == token:
                    return record.model_copy(deep=True)
        return None

    def list_for_owner(self, owner_id: str) -> list[FeedToken]:
        with self._lock:
            tokens = [
                token.model_copy(deep=True)
                for token in self._tokens.values()
                if token.owner_id == owner_id
            ]
        return sorted(tokens, key=lambda t: (t.created_at, t.id))

    def insert(self, feed_token: FeedToken) -> FeedToken:
        with self._lock:
            self._tokens[feed_token.id] = feed_token.model_copy(deep=True)
            self._commit()
        return feed_token.model_copy(deep=True)

    def update(self, token_id: str, changes: dict) -> FeedToken:
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None:
                raise NotFoundError(f"Feed token not found: {token_id}")
            updated = merge_changes(token, changes)
            self._tokens[token_id] = updated
            self._commit()
            return updated.model_copy(deep=True)

    def increment_access(self, token_id: str, now: int) -> FeedToken:
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None:
                raise NotFoundError(f"Feed token not found: {token_id}")
            return self.update(
                token_id,
                {"access_count": token.access_count + 1, "last_accessed_at": now},
            )

    def delete(self, token_id: str) -> None:
        with self._lock:
            if self._tokens.pop(token_id, None) is None:
                raise NotFoundError(f"Feed token not found: {token_id}")
            self._commit()
