"""Import service for one-shot ICS uploads."""

import logging
from datetime import tzinfo
from pathlib import Path

from icalsync.ingestion.ics_parser import ICSParser
from icalsync.models.event import CalendarEvent
from icalsync.models.sync import ImportResult
from icalsync.storage.base import EventStore
from icalsync.utils import Clock, now_ms

logger = logging.getLogger(__name__)


class ImportService:
    """Imports ICS data as owner events, skipping UIDs already present."""

    def __init__(
        self,
        events: EventStore,
        local_tz: tzinfo | None = None,
        clock: Clock = now_ms,
    ):
        self.events = events
        self.parser = ICSParser(local_tz=local_tz, clock=clock)
        self.clock = clock

    def import_ics(self, owner_id: str, ics_text: str) -> ImportResult:
        """
        Import events from ICS text.

        Args:
            owner_id: User receiving the events
            ics_text: Raw ICS data

        Returns:
            ImportResult with imported and skipped counts
        """
        parsed = self.parser.parse(ics_text)
        now = self.clock()
        inserts: list[CalendarEvent] = []
        seen: set[str] = set()
        skipped = 0

        for item in parsed:
            if item.uid in seen or self.events.has_external_uid(owner_id, item.uid):
                skipped += 1
                continue
            seen.add(item.uid)
            inserts.append(item.to_event(owner_id, timestamp=now))

        if inserts:
            self.events.apply(inserts=inserts)

        logger.info(f"Imported {len(inserts)} events for {owner_id} ({skipped} skipped)")
        return ImportResult(imported=len(inserts), skipped=skipped)

    def import_file(self, owner_id: str, path: Path) -> ImportResult:
        """Import events from an ICS file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        input_path = Path(path).expanduser().resolve()
        if not input_path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        logger.info(f"Reading ICS file: {input_path}")
        return self.import_ics(owner_id, input_path.read_text(encoding="utf-8"))
