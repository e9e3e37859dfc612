"""Tolerant ICS text parser for imported files and subscribed feeds."""

import logging
import random
import re
import string
from datetime import datetime, timezone, tzinfo
from typing import Callable

from dateutil import parser as date_parser

from icalsync.constants import DAY_MS, HOUR_MS, UNTITLED_EVENT
from icalsync.models.event import ParsedEvent
from icalsync.utils import Clock, datetime_to_ms, now_ms

logger = logging.getLogger(__name__)

# Called with the 0-based VEVENT index when a block has no UID
UidFactory = Callable[[int], str]

_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_DATETIME_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})(Z)?$")
_TZID_PREFIX_RE = re.compile(r"^TZID=[^:]+:")
_ESCAPE_RE = re.compile(r"\\([\\;,nN])")

_TEXT_PROPERTIES = {
    "SUMMARY": "title",
    "DESCRIPTION": "description",
    "LOCATION": "location",
}


def unfold_lines(text: str) -> list[str]:
    """Normalize line endings, join folded lines, and drop blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n[ \t]", "", text)
    return [line for line in text.split("\n") if line.strip()]


def unescape_text(value: str) -> str:
    """Reverse iCalendar TEXT escaping in a single pass."""

    def _replace(match: re.Match) -> str:
        char = match.group(1)
        return "\n" if char in "nN" else char

    return _ESCAPE_RE.sub(_replace, value)


def parse_ical_date(
    value: str, is_date: bool = False, local_tz: tzinfo | None = None
) -> tuple[int, bool] | None:
    """
    Parse an iCalendar DATE or DATE-TIME value.

    Args:
        value: Raw property value, optionally prefixed with ``TZID=...:``
        is_date: True when the property carried ``VALUE=DATE``
        local_tz: Zone for floating times and all-day dates (host zone if None)

    Returns:
        (epoch ms, all_day) or None when the value cannot be parsed
    """
    value = _TZID_PREFIX_RE.sub("", value.strip())

    try:
        match = _DATE_RE.match(value)
        if match:
            year, month, day = (int(part) for part in match.groups())
            midnight = datetime(year, month, day, tzinfo=local_tz)
            return datetime_to_ms(midnight), True

        match = _DATETIME_RE.match(value)
        if match:
            parts = [int(part) for part in match.groups()[:6]]
            tz = timezone.utc if match.group(7) else local_tz
            return datetime_to_ms(datetime(*parts, tzinfo=tz)), False

        moment = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None

    if moment.tzinfo is None and local_tz is not None:
        moment = moment.replace(tzinfo=local_tz)
    return datetime_to_ms(moment), is_date


def random_uid(clock: Clock = now_ms) -> str:
    """Synthesize a UID for a VEVENT that has none."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"imported-{clock()}-{suffix}"


class ICSParser:
    """Parser turning ICS text into ParsedEvent records.

    Only the properties the sync engine stores are read. VTIMEZONE blocks
    and components nested inside a VEVENT are skipped, and a malformed block
    never aborts the rest of the feed.
    """

    def __init__(
        self,
        local_tz: tzinfo | None = None,
        uid_factory: UidFactory | None = None,
        clock: Clock = now_ms,
    ):
        """
        Initialize parser.

        Args:
            local_tz: Zone for floating times and all-day dates (host zone if None)
            uid_factory: Builds a UID for blocks without one (random if None)
            clock: Time source for synthesized UIDs
        """
        self.local_tz = local_tz
        self.uid_factory = uid_factory
        self.clock = clock

    def parse(self, text: str) -> list[ParsedEvent]:
        """Parse ICS text into events, in document order."""
        events: list[ParsedEvent] = []
        current: dict | None = None
        nested_depth = 0
        block_index = 0

        for line in unfold_lines(text):
            upper = line.strip().upper()

            if upper == "BEGIN:VEVENT" and current is None:
                current = {}
                nested_depth = 0
                continue

            if current is None:
                continue

            if upper.startswith("BEGIN:"):
                nested_depth += 1
                continue

            if upper.startswith("END:"):
                if nested_depth:
                    nested_depth -= 1
                    continue
                if upper == "END:VEVENT":
                    event = self._build_event(current, block_index)
                    if event is not None:
                        events.append(event)
                    block_index += 1
                    current = None
                continue

            if nested_depth:
                continue

            self._read_property(line, current)

        if current is not None:
            logger.debug("Dropping unterminated VEVENT block at end of input")

        logger.debug(f"Parsed {len(events)} events from ICS text")
        return events

    def _read_property(self, line: str, current: dict) -> None:
        """Store one content line into the block accumulator."""
        colon = line.find(":")
        if colon == -1:
            return

        prop_part = line[:colon]
        value = line[colon + 1 :]
        segments = prop_part.split(";")
        name = segments[0].strip().upper()
        params = {segment.strip().upper() for segment in segments[1:]}

        if name == "UID":
            current["uid"] = value.strip()
        elif name in _TEXT_PROPERTIES:
            current[_TEXT_PROPERTIES[name]] = unescape_text(value)
        elif name == "RRULE":
            current["recurrence_rule"] = value
        elif name in ("DTSTART", "DTEND"):
            parsed = parse_ical_date(value, "VALUE=DATE" in params, self.local_tz)
            if parsed is None:
                logger.debug(f"Ignoring unparseable {name} value: {value!r}")
                return
            current[name] = parsed

    def _build_event(self, current: dict, index: int) -> ParsedEvent | None:
        """Apply defaults to a closed block; None when it has no start."""
        start = current.get("DTSTART")
        if start is None:
            logger.debug("Dropping VEVENT without a parseable DTSTART")
            return None

        start_time, all_day = start
        end = current.get("DTEND")
        if end is not None:
            end_time = end[0]
        else:
            end_time = start_time + (DAY_MS if all_day else HOUR_MS)

        uid = current.get("uid")
        if not uid:
            uid = self.uid_factory(index) if self.uid_factory else random_uid(self.clock)

        return ParsedEvent(
            uid=uid,
            title=current.get("title") or UNTITLED_EVENT,
            start_time=start_time,
            end_time=end_time,
            all_day=all_day,
            description=current.get("description") or None,
            location=current.get("location") or None,
            recurrence_rule=current.get("recurrence_rule") or None,
        )


def parse_ics(text: str, **kwargs) -> list[ParsedEvent]:
    """Parse ICS text with a one-off ICSParser."""
    return ICSParser(**kwargs).parse(text)
