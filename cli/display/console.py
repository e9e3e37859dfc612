"""Shared Rich console instances for terminal output."""

from rich.console import Console

# Regular output used by all renderers
console = Console()

# Error output (kept off stdout so exported ICS can be piped)
err_console = Console(stderr=True)
