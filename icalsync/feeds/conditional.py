"""HTTP conditional caching (ETag / Last-Modified) for calendar feeds."""

import hashlib
import logging
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from enum import Enum
from typing import Sequence

from pydantic import BaseModel

from icalsync.models.event import CalendarEvent
from icalsync.utils import ms_to_utc

logger = logging.getLogger(__name__)

# Number of hex digits kept from the SHA-256 digest
ETAG_LENGTH = 32


class CacheDecision(str, Enum):
    NOT_MODIFIED = "not_modified"
    MUST_SERVE = "must_serve"


class CacheValidators(BaseModel):
    """Validators describing one rendering of a feed."""

    etag: str
    last_modified: int

    @property
    def last_modified_http(self) -> str:
        return format_http_date(self.last_modified)


def format_http_date(ms: int) -> str:
    """Format epoch milliseconds as an RFC 7231 HTTP-date."""
    return format_datetime(ms_to_utc(ms).replace(microsecond=0), usegmt=True)


def parse_http_date(value: str | None) -> datetime | None:
    """Parse an HTTP-date header value; None when absent or malformed."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _event_fingerprint(event: CalendarEvent) -> str:
    # Every field that reaches the rendered VEVENT, except DTSTAMP
    fields = (
        event.id,
        event.external_uid or "",
        str(event.start_time),
        str(event.end_time),
        "1" if event.all_day else "0",
        event.title,
        event.description or "",
        event.location or "",
        event.recurrence_rule or "",
        str(event.updated_at),
    )
    return "\x1f".join(fields)


def compute_etag(events: Sequence[CalendarEvent], calendar_name: str | None = None) -> str:
    """Quoted content fingerprint over the events in order plus the calendar name."""
    digest = hashlib.sha256()
    digest.update((calendar_name or "").encode("utf-8"))
    for event in events:
        digest.update(b"\x1e")
        digest.update(_event_fingerprint(event).encode("utf-8"))
    return f'"{digest.hexdigest()[:ETAG_LENGTH]}"'


def compute_last_modified(events: Sequence[CalendarEvent], now: int) -> int:
    """Latest mutation time among the events, or now when there are none."""
    if not events:
        return now
    return max(event.updated_at for event in events)


def compute_validators(
    events: Sequence[CalendarEvent], calendar_name: str | None, now: int
) -> CacheValidators:
    return CacheValidators(
        etag=compute_etag(events, calendar_name),
        last_modified=compute_last_modified(events, now),
    )


def evaluate(
    validators: CacheValidators,
    if_none_match: str | None = None,
    if_modified_since: str | None = None,
) -> CacheDecision:
    """
    Decide whether a client's cached copy is still current.

    If-None-Match is compared as an exact string. If-Modified-Since is
    compared at one-second resolution, and an unparseable date is ignored.
    Either validator matching is enough for NOT_MODIFIED.
    """
    if if_none_match and if_none_match.strip() == validators.etag:
        return CacheDecision.NOT_MODIFIED

    since = parse_http_date(if_modified_since)
    if since is not None:
        if validators.last_modified // 1000 <= int(since.timestamp()):
            return CacheDecision.NOT_MODIFIED
    elif if_modified_since:
        logger.debug(f"Ignoring unparseable If-Modified-Since: {if_modified_since!r}")

    return CacheDecision.MUST_SERVE
