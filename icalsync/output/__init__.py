"""ICS output: writer and export."""

from icalsync.output.export import ExportService
from icalsync.output.ics_writer import ICSWriter, generate_uid

__all__ = ["ExportService", "ICSWriter", "generate_uid"]
