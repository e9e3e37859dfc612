"""Display module for rendering CLI output.

This module provides:
- console / err_console: Shared Rich console instances
- TableRenderer: Subscription and feed token tables
- SummaryRenderer: Sync and import summaries
- Formatting functions for timestamps and sync counts
"""

from cli.display.console import console, err_console
from cli.display.formatters import format_counts, format_relative_time, format_timestamp
from cli.display.summary_renderer import SummaryRenderer
from cli.display.table_renderer import TableRenderer

__all__ = [
    # Consoles
    "console",
    "err_console",
    # Renderers
    "TableRenderer",
    "SummaryRenderer",
    # Formatters
    "format_counts",
    "format_relative_time",
    "format_timestamp",
]
