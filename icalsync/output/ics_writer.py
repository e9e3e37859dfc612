"""ICS writer for exported files and published feeds."""

import logging
import uuid
from datetime import timedelta, tzinfo
from pathlib import Path
from typing import Iterable

from icalendar import Calendar, Event
from icalendar.prop import vDuration, vInline

from icalsync.constants import DEFAULT_UID_DOMAIN, PRODID
from icalsync.exceptions import CalendarError
from icalsync.models.event import CalendarEvent
from icalsync.utils import Clock, ms_to_local_date, ms_to_utc, now_ms

logger = logging.getLogger(__name__)


def generate_uid(event_id: str, domain: str = DEFAULT_UID_DOMAIN) -> str:
    """Stable RFC 7986 style UID derived from an internal event id."""
    return f"{uuid.uuid5(uuid.NAMESPACE_URL, f'{domain}/{event_id}')}@{domain}"


class ICSWriter:
    """Writer rendering stored events as an iCalendar document."""

    def __init__(
        self,
        uid_domain: str = DEFAULT_UID_DOMAIN,
        local_tz: tzinfo | None = None,
        refresh_interval: timedelta = timedelta(hours=1),
        clock: Clock = now_ms,
    ):
        """
        Initialize writer.

        Args:
            uid_domain: Domain suffix for UIDs of native events
            local_tz: Zone used to turn all-day instants into dates (host zone if None)
            refresh_interval: Polling hint advertised to subscribing clients
            clock: Time source for DTSTAMP
        """
        self.uid_domain = uid_domain
        self.local_tz = local_tz
        self.refresh_interval = refresh_interval
        self.clock = clock

    def event_uid(self, event: CalendarEvent) -> str:
        """UID emitted for an event: the feed's own UID when it has one."""
        return event.external_uid or generate_uid(event.id, self.uid_domain)

    def build_calendar(
        self, events: Iterable[CalendarEvent], calendar_name: str | None = None
    ) -> Calendar:
        """Build an icalendar Calendar for the given events."""
        cal = Calendar()
        cal.add("prodid", PRODID)
        cal.add("version", "2.0")
        cal.add("calscale", "GREGORIAN")
        cal.add("method", "PUBLISH")
        if calendar_name:
            cal.add("X-WR-CALNAME", calendar_name)

        refresh = vDuration(self.refresh_interval)
        refresh.params["VALUE"] = "DURATION"
        cal["REFRESH-INTERVAL"] = refresh
        cal["X-PUBLISHED-TTL"] = vDuration(self.refresh_interval)

        stamp = ms_to_utc(self.clock())
        for event_model in events:
            cal.add_component(self._build_event(event_model, stamp))

        return cal

    def _build_event(self, event_model: CalendarEvent, stamp) -> Event:
        event = Event()
        event.add("uid", self.event_uid(event_model))
        event.add("dtstamp", stamp)

        if event_model.all_day:
            # DATE values; DTEND stays exclusive
            event.add("dtstart", ms_to_local_date(event_model.start_time, self.local_tz))
            event.add("dtend", ms_to_local_date(event_model.end_time, self.local_tz))
        else:
            event.add("dtstart", ms_to_utc(event_model.start_time))
            event.add("dtend", ms_to_utc(event_model.end_time))

        event.add("summary", event_model.title)
        if event_model.description:
            event.add("description", event_model.description)
        if event_model.location:
            event.add("location", event_model.location)
        if event_model.recurrence_rule:
            # Opaque passthrough, never re-serialized
            event["RRULE"] = vInline(event_model.recurrence_rule)

        if event_model.updated_at:
            event.add("last-modified", ms_to_utc(event_model.updated_at))
        event.add("sequence", 0)
        event.add("status", "CONFIRMED")
        event.add("transp", "OPAQUE")
        return event

    def generate(
        self, events: Iterable[CalendarEvent], calendar_name: str | None = None
    ) -> str:
        """Render events to ICS text (CRLF line endings, folded lines)."""
        cal = self.build_calendar(events, calendar_name)
        return cal.to_ical().decode("utf-8")

    def write(
        self,
        events: Iterable[CalendarEvent],
        path: Path,
        calendar_name: str | None = None,
    ) -> None:
        """Write events to an ICS file.

        Raises:
            CalendarError: If the file cannot be written
        """
        content = self.generate(events, calendar_name)
        try:
            path.write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            raise CalendarError(f"Failed to write ICS file {path}: {e}") from e
        logger.info(f"Wrote calendar to {path}")
