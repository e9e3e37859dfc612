"""JSON-file stores persisting the in-memory stores under a data directory."""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel

from icalsync.constants import (
    EVENTS_FILENAME,
    FEED_TOKENS_FILENAME,
    SUBSCRIPTIONS_FILENAME,
)
from icalsync.exceptions import CalendarError
from icalsync.models.event import CalendarEvent
from icalsync.models.feed_token import FeedToken
from icalsync.models.subscription import Subscription
from icalsync.storage.memory import (
    MemoryEventStore,
    MemoryFeedTokenStore,
    MemorySubscriptionRegistry,
)
from icalsync.utils import ModelT

logger = logging.getLogger(__name__)


def load_records(path: Path, model: type[ModelT]) -> list[ModelT]:
    """Load a JSON array of records; empty when the file does not exist."""
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CalendarError(f"Corrupt data file {path}: {e}") from e
    return [model.model_validate(item) for item in data]


def save_records(path: Path, records: list[BaseModel]) -> None:
    """Write records as a JSON array, replacing the file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump([r.model_dump(mode="json") for r in records], f, indent=2)
    os.replace(tmp_path, path)


class JsonEventStore(MemoryEventStore):
    """Event store backed by events.json."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / EVENTS_FILENAME
        super().__init__(load_records(self.path, CalendarEvent))
        logger.debug(f"Loaded {len(self._events)} events from {self.path}")

    def _commit(self) -> None:
        save_records(self.path, list(self._events.values()))


class JsonSubscriptionRegistry(MemorySubscriptionRegistry):
    """Subscription registry backed by subscriptions.json."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / SUBSCRIPTIONS_FILENAME
        super().__init__(load_records(self.path, Subscription))

    def _commit(self) -> None:
        save_records(self.path, list(self._subscriptions.values()))


class JsonFeedTokenStore(MemoryFeedTokenStore):
    """Feed token store backed by feed_tokens.json."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / FEED_TOKENS_FILENAME
        super().__init__(load_records(self.path, FeedToken))

    def _commit(self) -> None:
        save_records(self.path, list(self._tokens.values()))
