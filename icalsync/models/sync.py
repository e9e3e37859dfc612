"""Sync, import, and feed result models."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from icalsync.models.subscription import SyncCounts


class SyncState(str, Enum):
    """States of one subscription sync attempt."""

    IDLE = "idle"
    FETCHING = "fetching"
    NOT_MODIFIED = "not_modified"
    PARSING = "parsing"
    DIFFING = "diffing"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class SyncResult(BaseModel):
    """Result of reconciling one subscription."""

    subscription_id: str
    state: SyncState
    counts: SyncCounts = SyncCounts()
    not_modified: bool = False
    error: str | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """True if the attempt finished without failure."""
        return self.state == SyncState.DONE


class ImportResult(BaseModel):
    """Result of a one-shot ICS import."""

    imported: int = 0
    skipped: int = 0


@dataclass
class FetchResult:
    """Response of a conditional feed fetch."""

    status_code: int
    body: str | None = None
    etag: str | None = None
    last_modified: str | None = None

    @property
    def not_modified(self) -> bool:
        """True for a 304 response."""
        return self.status_code == 304


@dataclass
class FeedResponse:
    """Framework-neutral HTTP response for the public feed."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
