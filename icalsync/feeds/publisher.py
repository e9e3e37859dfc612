"""Public feed serving with conditional GET support."""

import logging
from datetime import tzinfo

from icalsync.constants import BUSY_TITLE, FEED_CACHE_CONTROL, FEED_CONTENT_TYPE
from icalsync.feeds.conditional import CacheDecision, compute_validators, evaluate
from icalsync.feeds.tokens import FeedTokenManager
from icalsync.models.event import CalendarEvent
from icalsync.models.sync import FeedResponse
from icalsync.output.ics_writer import ICSWriter
from icalsync.storage.base import EventStore
from icalsync.utils import Clock, now_ms

logger = logging.getLogger(__name__)


def mask_private(event: CalendarEvent) -> CalendarEvent:
    """Hide the details of a private event, keeping only its time slot."""
    return event.model_copy(
        update={"title": BUSY_TITLE, "description": None, "location": None}
    )


class FeedPublisher:
    """Serves a user's events as an ICS feed addressed by a feed token."""

    def __init__(
        self,
        events: EventStore,
        tokens: FeedTokenManager,
        writer: ICSWriter | None = None,
        max_age: int = 300,
        clock: Clock = now_ms,
    ):
        self.events = events
        self.tokens = tokens
        self.writer = writer or ICSWriter(clock=clock)
        self.max_age = max_age
        self.clock = clock

    def feed_events(self, owner_id: str, include_private: bool) -> list[CalendarEvent]:
        """Owner events ordered by start, private ones masked unless allowed."""
        events = self.events.list_for_owner(owner_id)
        if include_private:
            return events
        return [mask_private(e) if e.is_private else e for e in events]

    def serve(
        self,
        token: str,
        if_none_match: str | None = None,
        if_modified_since: str | None = None,
    ) -> FeedResponse:
        """
        Serve the feed for a token.

        Returns:
            FeedResponse with 200 and ICS body, or 304 without body

        Raises:
            TokenInvalidError: If the token is unknown, revoked, or expired
        """
        record = self.tokens.resolve(token)
        events = self.feed_events(record.owner_id, record.include_private)

        validators = compute_validators(events, record.name, self.clock())
        headers = {
            "ETag": validators.etag,
            "Last-Modified": validators.last_modified_http,
            "Cache-Control": FEED_CACHE_CONTROL.format(max_age=self.max_age),
        }

        if evaluate(validators, if_none_match, if_modified_since) == CacheDecision.NOT_MODIFIED:
            logger.debug(f"Feed {record.id} not modified")
            return FeedResponse(status_code=304, headers=headers)

        self.tokens.record_access(record)
        body = self.writer.generate(events, record.name)
        headers.update(
            {
                "Content-Type": FEED_CONTENT_TYPE,
                "Content-Disposition": f'inline; filename="{record.name}.ics"',
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Expose-Headers": "ETag, Last-Modified",
            }
        )
        logger.info(f"Served feed {record.id} with {len(events)} events")
        return FeedResponse(status_code=200, headers=headers, body=body)
