"""Service container with lazy-initialized dependencies."""

from datetime import tzinfo

from icalsync.config import SyncConfig
from icalsync.feeds.publisher import FeedPublisher
from icalsync.feeds.tokens import FeedTokenManager
from icalsync.ingestion.service import ImportService
from icalsync.output.export import ExportService
from icalsync.output.ics_writer import ICSWriter
from icalsync.storage import (
    EventStore,
    FeedTokenStore,
    JsonEventStore,
    JsonFeedTokenStore,
    JsonSubscriptionRegistry,
    MemoryEventStore,
    MemoryFeedTokenStore,
    MemorySubscriptionRegistry,
    SubscriptionRegistry,
)
from icalsync.subscriptions import SubscriptionManager
from icalsync.sync.fetcher import FeedFetcher
from icalsync.sync.locks import SubscriptionLocks
from icalsync.sync.reconciler import Fetcher, ReconciliationEngine
from icalsync.sync.scheduler import SyncScheduler
from icalsync.utils import Clock, now_ms


class AppContext:
    """Wires stores and services together from a SyncConfig.

    Every dependency is built on first access, so the Flask app and the CLI
    only pay for what they use. Stores, fetcher, clock, and local zone can be
    injected (tests use in-memory stores and a fixed clock).

    Usage:
        ctx = AppContext()
        ctx.engine.sync_by_id(subscription_id)
    """

    def __init__(
        self,
        config: SyncConfig | None = None,
        events: EventStore | None = None,
        subscriptions: SubscriptionRegistry | None = None,
        tokens: FeedTokenStore | None = None,
        fetcher: Fetcher | None = None,
        clock: Clock = now_ms,
        local_tz: tzinfo | None = None,
    ):
        self._config = config
        self._events = events
        self._subscriptions = subscriptions
        self._tokens = tokens
        self._fetcher = fetcher
        self.clock = clock
        self.local_tz = local_tz
        self.locks = SubscriptionLocks()

        # Lazy-loaded services
        self._writer: ICSWriter | None = None
        self._engine: ReconciliationEngine | None = None
        self._scheduler: SyncScheduler | None = None
        self._subscription_manager: SubscriptionManager | None = None
        self._token_manager: FeedTokenManager | None = None
        self._publisher: FeedPublisher | None = None
        self._importer: ImportService | None = None
        self._exporter: ExportService | None = None

    @property
    def config(self) -> SyncConfig:
        """Get configuration (lazy-loaded)."""
        if self._config is None:
            self._config = SyncConfig.from_env()
        return self._config

    @property
    def events(self) -> EventStore:
        if self._events is None:
            if self.config.store_backend == "memory":
                self._events = MemoryEventStore()
            else:
                self._events = JsonEventStore(self.config.data_dir)
        return self._events

    @property
    def subscriptions(self) -> SubscriptionRegistry:
        if self._subscriptions is None:
            if self.config.store_backend == "memory":
                self._subscriptions = MemorySubscriptionRegistry()
            else:
                self._subscriptions = JsonSubscriptionRegistry(self.config.data_dir)
        return self._subscriptions

    @property
    def tokens(self) -> FeedTokenStore:
        if self._tokens is None:
            if self.config.store_backend == "memory":
                self._tokens = MemoryFeedTokenStore()
            else:
                self._tokens = JsonFeedTokenStore(self.config.data_dir)
        return self._tokens

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = FeedFetcher(timeout=self.config.fetch_timeout_seconds)
        return self._fetcher

    @property
    def writer(self) -> ICSWriter:
        if self._writer is None:
            self._writer = ICSWriter(
                uid_domain=self.config.uid_domain,
                local_tz=self.local_tz,
                clock=self.clock,
            )
        return self._writer

    @property
    def engine(self) -> ReconciliationEngine:
        """Get reconciliation engine (lazy-loaded)."""
        if self._engine is None:
            self._engine = ReconciliationEngine(
                self.events,
                self.subscriptions,
                self.fetcher,
                local_tz=self.local_tz,
                clock=self.clock,
                locks=self.locks,
            )
        return self._engine

    @property
    def scheduler(self) -> SyncScheduler:
        """Get sync scheduler (lazy-loaded, not started)."""
        if self._scheduler is None:
            self._scheduler = SyncScheduler(
                self.engine,
                self.subscriptions,
                interval_seconds=self.config.sync_interval_seconds,
                max_workers=self.config.sync_max_workers,
                clock=self.clock,
            )
        return self._scheduler

    @property
    def subscription_manager(self) -> SubscriptionManager:
        if self._subscription_manager is None:
            self._subscription_manager = SubscriptionManager(
                self.subscriptions,
                self.events,
                default_interval_minutes=self.config.default_sync_interval_minutes,
                clock=self.clock,
                locks=self.locks,
            )
        return self._subscription_manager

    @property
    def token_manager(self) -> FeedTokenManager:
        if self._token_manager is None:
            self._token_manager = FeedTokenManager(self.tokens, clock=self.clock)
        return self._token_manager

    @property
    def publisher(self) -> FeedPublisher:
        if self._publisher is None:
            self._publisher = FeedPublisher(
                self.events,
                self.token_manager,
                writer=self.writer,
                max_age=self.config.feed_max_age,
                clock=self.clock,
            )
        return self._publisher

    @property
    def importer(self) -> ImportService:
        if self._importer is None:
            self._importer = ImportService(self.events, local_tz=self.local_tz, clock=self.clock)
        return self._importer

    @property
    def exporter(self) -> ExportService:
        if self._exporter is None:
            self._exporter = ExportService(self.events, self.writer, self.config.calendar_name)
        return self._exporter
