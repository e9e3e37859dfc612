"""ICS ingestion: parsing and one-shot import."""

from icalsync.ingestion.ics_parser import ICSParser, parse_ical_date, parse_ics, unfold_lines
from icalsync.ingestion.service import ImportService

__all__ = [
    "ICSParser",
    "ImportService",
    "parse_ical_date",
    "parse_ics",
    "unfold_lines",
]
