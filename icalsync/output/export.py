"""Export of an owner's events as an ICS download."""

import logging

from icalsync.models.event import CalendarEvent
from icalsync.output.ics_writer import ICSWriter
from icalsync.storage.base import EventStore

logger = logging.getLogger(__name__)


class ExportService:
    """Renders an owner's events, optionally restricted to a time window."""

    def __init__(self, events: EventStore, writer: ICSWriter, calendar_name: str):
        self.events = events
        self.writer = writer
        self.calendar_name = calendar_name

    def select(
        self, owner_id: str, start: int | None = None, end: int | None = None
    ) -> list[CalendarEvent]:
        """Owner events whose start time lies within [start, end]."""
        return [
            event
            for event in self.events.list_for_owner(owner_id)
            if (start is None or event.start_time >= start)
            and (end is None or event.start_time <= end)
        ]

    def export(
        self, owner_id: str, start: int | None = None, end: int | None = None
    ) -> str:
        """Render the selected events as ICS text."""
        events = self.select(owner_id, start, end)
        logger.info(f"Exporting {len(events)} events for {owner_id}")
        return self.writer.generate(events, self.calendar_name)
