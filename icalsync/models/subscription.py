"""Feed subscription model."""

from pydantic import BaseModel, Field

from icalsync.utils import new_id


class SyncCounts(BaseModel):
    """Outcome counts of one reconciliation."""

    added: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        """Net number of changes."""
        return self.added + self.updated + self.deleted


class Subscription(BaseModel):
    """A remote ICS feed attached by a user.

    Sync metadata (cached validators, last sync fields) is written only by
    the reconciliation engine. Everything else is user-editable.
    """

    id: str = Field(default_factory=new_id)
    owner_id: str
    remote_url: str
    display_name: str
    color: str = "#34a853"
    auto_sync_enabled: bool = True
    sync_interval_minutes: int = Field(default=60, ge=1)

    # Conditional fetch validators from the last successful fetch
    cached_etag: str | None = None
    cached_last_modified: str | None = None

    # Overwritten on every sync attempt
    last_sync_at: int | None = None
    last_sync_error: str | None = None
    last_sync_counts: SyncCounts | None = None

    created_at: int = 0

    def is_due(self, now: int) -> bool:
        """True if auto-sync is on and the sync interval has elapsed."""
        if not self.auto_sync_enabled:
            return False
        if self.last_sync_at is None:
            return True
        return now - self.last_sync_at >= self.sync_interval_minutes * 60 * 1000
