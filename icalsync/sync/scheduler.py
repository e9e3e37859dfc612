"""Background scheduler syncing due subscriptions on a worker pool."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from icalsync.models.sync import SyncResult, SyncState
from icalsync.storage.base import SubscriptionRegistry
from icalsync.sync.reconciler import ReconciliationEngine
from icalsync.utils import Clock, now_ms

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs due subscription syncs every interval on a bounded thread pool."""

    def __init__(
        self,
        engine: ReconciliationEngine,
        subscriptions: SubscriptionRegistry,
        interval_seconds: float = 300,
        max_workers: int = 4,
        clock: Clock = now_ms,
    ):
        """
        Initialize scheduler.

        Args:
            engine: Reconciliation engine performing each sync
            subscriptions: Registry queried for due subscriptions
            interval_seconds: Seconds between ticks
            max_workers: Maximum concurrent syncs
            clock: Time source used to decide which subscriptions are due
        """
        self.engine = engine
        self.subscriptions = subscriptions
        self.interval_seconds = interval_seconds
        self.max_workers = max_workers
        self.clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> list[SyncResult]:
        """Sync every due subscription once and wait for all of them."""
        due = self.subscriptions.list_due(self.clock())
        if not due:
            logger.debug("No subscriptions due for sync")
            return []

        logger.info(f"Syncing {len(due)} subscriptions")
        results: list[SyncResult] = []
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="sync"
        ) as executor:
            futures = {executor.submit(self.engine.sync, sub): sub for sub in due}
            for future in as_completed(futures):
                sub = futures[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    # sync() records its own failures; this is a last resort
                    logger.exception(f"Unexpected error syncing {sub.id}")
                    results.append(
                        SyncResult(subscription_id=sub.id, state=SyncState.FAILED, error=str(e))
                    )

        failed = sum(1 for result in results if not result.ok)
        logger.info(f"Sync tick finished: {len(results) - failed} ok, {failed} failed")
        return results

    def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="sync-scheduler", daemon=True
        )
        self._thread.start()
        logger.info(f"Sync scheduler started (every {self.interval_seconds}s)")

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to stop and wait for the current tick to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Sync scheduler stopped")

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("Sync tick failed")
            self._stop.wait(self.interval_seconds)
