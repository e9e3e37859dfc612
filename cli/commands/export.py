"""Export events to an ICS file or stdout."""

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from cli.context import get_context
from cli.display import err_console
from cli.utils import parse_date_option
from icalsync.exceptions import CalendarError

logger = logging.getLogger(__name__)


def export(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file (prints to stdout if omitted)"),
    ] = None,
    start: Annotated[
        str | None,
        typer.Option("--start", help="Only events starting at or after (ISO-8601)"),
    ] = None,
    end: Annotated[
        str | None,
        typer.Option("--end", help="Only events starting at or before (ISO-8601)"),
    ] = None,
) -> None:
    """Export your calendar as ICS."""
    ctx = get_context()
    start_ms = parse_date_option(start, "--start")
    end_ms = parse_date_option(end, "--end")
    exporter = ctx.app.exporter

    if output is None:
        typer.echo(exporter.export(ctx.owner_id, start_ms, end_ms), nl=False)
        return

    events = exporter.select(ctx.owner_id, start_ms, end_ms)
    try:
        exporter.writer.write(events, output, exporter.calendar_name)
    except CalendarError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    err_console.print(f"[green]✓[/green] Exported {len(events)} events to {output}")
