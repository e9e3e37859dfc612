"""Import events from an ICS file."""

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from cli.context import get_context
from cli.display import SummaryRenderer

logger = logging.getLogger(__name__)


def import_command(
    ics_file: Annotated[
        Path,
        typer.Argument(help="Path to the .ics file to import", exists=True, dir_okay=False),
    ],
) -> None:
    """Import events from an ICS file, skipping UIDs already present."""
    ctx = get_context()
    try:
        result = ctx.app.importer.import_file(ctx.owner_id, ics_file)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read {ics_file}: {e}")
        raise typer.Exit(1)

    SummaryRenderer().render_import(result)
