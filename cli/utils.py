"""CLI utilities for prompts and option parsing."""

import typer
from dateutil import parser as date_parser

from icalsync.utils import datetime_to_ms


def confirm_or_exit(message: str, force: bool = False) -> None:
    """Ask for confirmation unless forced; exit quietly when declined."""
    if force:
        return
    if not typer.confirm(message):
        typer.echo("Cancelled.")
        raise typer.Exit(0)


def parse_date_option(value: str | None, option_name: str) -> int | None:
    """Parse an ISO-8601 date/datetime option to epoch ms (local if naive)."""
    if value is None:
        return None
    try:
        return datetime_to_ms(date_parser.isoparse(value))
    except ValueError:
        raise typer.BadParameter(
            f"Invalid date: {value}. Use YYYY-MM-DD or an ISO-8601 datetime.",
            param_hint=option_name,
        )


def resolve_id(prefix: str, ids: list[str], kind: str) -> str:
    """Expand a (possibly shortened) record id shown in a listing.

    Raises:
        typer.BadParameter: If no id or more than one id matches
    """
    if prefix in ids:
        return prefix
    matches = [record_id for record_id in ids if record_id.startswith(prefix)]
    if not matches:
        raise typer.BadParameter(f"No {kind} matches '{prefix}'")
    if len(matches) > 1:
        raise typer.BadParameter(f"'{prefix}' matches {len(matches)} {kind}s; use more characters")
    return matches[0]
