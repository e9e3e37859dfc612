"""Manage feed tokens that publish your calendar."""

import logging

import typer
from typing_extensions import Annotated

from cli.context import get_context
from cli.display import TableRenderer, console
from cli.utils import confirm_or_exit, resolve_id
from icalsync.exceptions import CalendarError

logger = logging.getLogger(__name__)

token_app = typer.Typer(help="Manage published feed tokens.", no_args_is_help=True)


def resolve_token_id(prefix: str) -> str:
    ctx = get_context()
    tokens = ctx.app.token_manager.list(ctx.owner_id)
    return resolve_id(prefix, [token.id for token in tokens], "token")


def feed_url(token: str) -> str:
    """Public URL of a feed served by `icalsync serve`."""
    config = get_context().config
    return f"http://{config.host}:{config.port}/feed/{token}"


@token_app.command("create")
def create(
    name: Annotated[str, typer.Argument(help="Feed name (shown as the calendar name)")],
    include_private: Annotated[
        bool, typer.Option("--include-private", help="Show private event details")
    ] = False,
    expires_in_days: Annotated[
        int | None, typer.Option("--expires-in", min=1, help="Expire after N days")
    ] = None,
) -> None:
    """Create a feed token. The token is shown only once."""
    ctx = get_context()
    try:
        record = ctx.app.token_manager.create(
            ctx.owner_id,
            name,
            include_private=include_private,
            expires_in_days=expires_in_days,
        )
    except CalendarError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Created feed token [dim]({record.id})[/dim]")
    console.print(f"  Token: [bold]{record.token}[/bold]")
    console.print(f"  URL:   {feed_url(record.token)}")
    console.print("\n[yellow]Save this token now; it will not be shown again.[/yellow]")


@token_app.command("ls")
def ls() -> None:
    """List feed tokens (token values are only previewed)."""
    ctx = get_context()
    TableRenderer().render_tokens(ctx.app.token_manager.list(ctx.owner_id))


@token_app.command("revoke")
def revoke(
    token_id: Annotated[str, typer.Argument(help="Token ID (prefix ok)")],
) -> None:
    """Deactivate a feed token, keeping its record."""
    ctx = get_context()
    record = ctx.app.token_manager.revoke(ctx.owner_id, resolve_token_id(token_id))
    console.print(f"[green]✓[/green] Revoked feed token '{record.name}'")


@token_app.command("rm")
def rm(
    token_id: Annotated[str, typer.Argument(help="Token ID (prefix ok)")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation prompt")] = False,
) -> None:
    """Permanently delete a feed token."""
    ctx = get_context()
    resolved = resolve_token_id(token_id)
    confirm_or_exit(f"Delete feed token {resolved[:8]}?", force)
    ctx.app.token_manager.delete(ctx.owner_id, resolved)
    console.print("[green]✓[/green] Deleted feed token")
