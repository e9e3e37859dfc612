"""Per-subscription locks shared by sync runs and subscription removal."""

import threading


class SubscriptionLocks:
    """Hands out one lock per subscription id, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def get(self, subscription_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(subscription_id, threading.Lock())

    def discard(self, subscription_id: str) -> None:
        """Forget a removed subscription's lock."""
        with self._guard:
            self._locks.pop(subscription_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
