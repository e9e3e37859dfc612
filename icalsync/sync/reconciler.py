"""Reconciliation of remote ICS feeds into local event storage."""

import logging
import time
from datetime import tzinfo
from typing import Protocol

from icalsync.exceptions import FetchFailedError, NotFoundError, SubscriptionGoneError
from icalsync.ingestion.ics_parser import ICSParser
from icalsync.models.event import CalendarEvent, ParsedEvent
from icalsync.models.subscription import Subscription, SyncCounts
from icalsync.models.sync import FetchResult, SyncResult, SyncState
from icalsync.storage.base import EventStore, SubscriptionRegistry
from icalsync.sync.locks import SubscriptionLocks
from icalsync.utils import Clock, now_ms

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Protocol for feed fetchers."""

    def fetch(
        self, url: str, etag: str | None = None, last_modified: str | None = None
    ) -> FetchResult:
        ...


def dedupe_by_uid(parsed: list[ParsedEvent]) -> list[ParsedEvent]:
    """Keep the first block for each UID, preserving order."""
    seen: set[str] = set()
    unique = []
    for event in parsed:
        if event.uid in seen:
            logger.debug(f"Skipping duplicate UID in feed: {event.uid}")
            continue
        seen.add(event.uid)
        unique.append(event)
    return unique


class ReconciliationEngine:
    """Merges a subscription's remote feed into the event store.

    A sync attempt moves through FETCHING, then NOT_MODIFIED or PARSING,
    DIFFING and PERSISTING, and ends DONE or FAILED. Running it twice on an
    unchanged feed writes nothing the second time.

    Syncs of the same subscription are serialized through ``locks``, which
    is shared with whatever removes subscriptions.
    """

    def __init__(
        self,
        events: EventStore,
        subscriptions: SubscriptionRegistry,
        fetcher: Fetcher,
        local_tz: tzinfo | None = None,
        clock: Clock = now_ms,
        locks: SubscriptionLocks | None = None,
    ):
        self.events = events
        self.subscriptions = subscriptions
        self.fetcher = fetcher
        self.local_tz = local_tz
        self.clock = clock
        self.locks = locks or SubscriptionLocks()

    def sync_by_id(self, subscription_id: str, force: bool = False) -> SyncResult:
        """
        Sync one subscription on demand.

        Args:
            subscription_id: Subscription to sync
            force: Skip conditional headers and always download the feed

        Raises:
            NotFoundError: If the subscription does not exist
        """
        subscription = self.subscriptions.get(subscription_id)
        if subscription is None:
            raise NotFoundError(f"Subscription not found: {subscription_id}")
        return self.sync(subscription, force=force)

    def sync(self, subscription: Subscription, force: bool = False) -> SyncResult:
        """Run one sync attempt. Failures are recorded, never raised."""
        started = time.monotonic()
        with self.locks.get(subscription.id):
            # Pick up validators written by a sync that held the lock before us
            current = self.subscriptions.get(subscription.id)
            if current is None:
                return self._gone(subscription, started)
            return self._sync(current, force, started)

    def _sync(
        self, subscription: Subscription, force: bool, started: float
    ) -> SyncResult:
        state = SyncState.FETCHING
        logger.info(f"Syncing subscription '{subscription.display_name}' ({subscription.id})")

        try:
            fetched = self.fetcher.fetch(
                subscription.remote_url,
                etag=None if force else subscription.cached_etag,
                last_modified=None if force else subscription.cached_last_modified,
            )

            if fetched.not_modified:
                state = SyncState.NOT_MODIFIED
                counts = SyncCounts()
                self._record_success(subscription, fetched, counts)
                logger.info(f"Subscription {subscription.id} not modified")
                return self._result(subscription, SyncState.DONE, started, counts, True)

            state = SyncState.PARSING
            parsed = self.parse_feed(subscription, fetched.body or "")

            state = SyncState.DIFFING
            counts = self.reconcile(subscription, parsed)

            state = SyncState.PERSISTING
            self._record_success(subscription, fetched, counts)
        except SubscriptionGoneError:
            return self._gone(subscription, started)
        except FetchFailedError as e:
            logger.warning(f"Fetch failed for subscription {subscription.id}: {e}")
            return self._fail(subscription, started, str(e))
        except Exception as e:
            logger.exception(
                f"Sync of subscription {subscription.id} failed while {state.value}"
            )
            return self._fail(subscription, started, str(e) or type(e).__name__)

        logger.info(
            f"Synced subscription '{subscription.display_name}': "
            f"+{counts.added} ~{counts.updated} -{counts.deleted}"
        )
        return self._result(subscription, SyncState.DONE, started, counts)

    def parse_feed(self, subscription: Subscription, body: str) -> list[ParsedEvent]:
        """Parse a feed body with UIDs that stay stable across syncs."""
        parser = ICSParser(
            local_tz=self.local_tz,
            uid_factory=lambda index: f"{subscription.id}-{index}@subscription",
            clock=self.clock,
        )
        return dedupe_by_uid(parser.parse(body))

    def reconcile(
        self, subscription: Subscription, parsed: list[ParsedEvent]
    ) -> SyncCounts:
        """Diff parsed events against stored ones and persist the changes."""
        now = self.clock()
        owner_id = subscription.owner_id
        stored = {
            event.external_uid: event
            for event in self.events.list_for_subscription(owner_id, subscription.id)
        }

        inserts: list[CalendarEvent] = []
        updates: list[tuple[str, dict]] = []
        for item in parsed:
            existing = stored.get(item.uid)
            if existing is None:
                inserts.append(
                    item.to_event(
                        owner_id,
                        subscription_id=subscription.id,
                        color=subscription.color,
                        timestamp=now,
                    )
                )
                continue

            changes = {
                field: value
                for field, value in item.mutable_fields().items()
                if getattr(existing, field) != value
            }
            if existing.color != subscription.color:
                changes["color"] = subscription.color
            if changes:
                changes["updated_at"] = now
                updates.append((existing.id, changes))

        feed_uids = {item.uid for item in parsed}
        deletes = [event.id for uid, event in stored.items() if uid not in feed_uids]

        if inserts or updates or deletes:
            if self.subscriptions.get(subscription.id) is None:
                raise SubscriptionGoneError(subscription.id)
            self.events.apply(inserts=inserts, updates=updates, deletes=deletes)

        return SyncCounts(added=len(inserts), updated=len(updates), deleted=len(deletes))

    def _record_success(
        self, subscription: Subscription, fetched: FetchResult, counts: SyncCounts
    ) -> None:
        changes = {
            "last_sync_at": self.clock(),
            "last_sync_error": None,
            "last_sync_counts": counts,
        }
        if fetched.etag:
            changes["cached_etag"] = fetched.etag
        if fetched.last_modified:
            changes["cached_last_modified"] = fetched.last_modified
        self.subscriptions.update(subscription.id, changes)

    def _gone(self, subscription: Subscription, started: float) -> SyncResult:
        logger.warning(f"Subscription {subscription.id} was removed; dropping its sync")
        return self._result(
            subscription, SyncState.FAILED, started, error="Subscription not found"
        )

    def _fail(self, subscription: Subscription, started: float, error: str) -> SyncResult:
        try:
            self.subscriptions.update(
                subscription.id,
                {
                    "last_sync_at": self.clock(),
                    "last_sync_error": error,
                    "last_sync_counts": None,
                },
            )
        except Exception:
            logger.exception(f"Could not record sync failure for {subscription.id}")
        return self._result(subscription, SyncState.FAILED, started, error=error)

    def _result(
        self,
        subscription: Subscription,
        state: SyncState,
        started: float,
        counts: SyncCounts | None = None,
        not_modified: bool = False,
        error: str | None = None,
    ) -> SyncResult:
        return SyncResult(
            subscription_id=subscription.id,
            state=state,
            counts=counts or SyncCounts(),
            not_modified=not_modified,
            error=error,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
