"""Manage remote calendar subscriptions."""

import logging

import typer
from typing_extensions import Annotated

from cli.context import get_context
from cli.display import SummaryRenderer, TableRenderer, console
from cli.utils import confirm_or_exit, resolve_id
from icalsync.exceptions import CalendarError

logger = logging.getLogger(__name__)

subscribe_app = typer.Typer(help="Manage remote calendar subscriptions.", no_args_is_help=True)


def resolve_subscription_id(prefix: str) -> str:
    ctx = get_context()
    subs = ctx.app.subscription_manager.list(ctx.owner_id)
    return resolve_id(prefix, [sub.id for sub in subs], "subscription")


@subscribe_app.command("add")
def add(
    url: Annotated[str, typer.Argument(help="Feed URL (http, https, or webcal)")],
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Display name (defaults to host)")
    ] = None,
    color: Annotated[
        str | None, typer.Option("--color", "-c", help="Color for imported events")
    ] = None,
    interval: Annotated[
        int | None,
        typer.Option("--interval", "-i", min=1, help="Minutes between automatic syncs"),
    ] = None,
    auto_sync: Annotated[
        bool, typer.Option("--auto-sync/--no-auto-sync", help="Sync in the background")
    ] = True,
    sync_now: Annotated[
        bool, typer.Option("--sync", help="Sync immediately after subscribing")
    ] = False,
) -> None:
    """Subscribe to a remote ICS feed."""
    ctx = get_context()
    try:
        sub = ctx.app.subscription_manager.create(
            ctx.owner_id,
            url,
            display_name=name,
            color=color,
            auto_sync_enabled=auto_sync,
            sync_interval_minutes=interval,
        )
    except CalendarError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    console.print("[green]✓[/green] Subscribed")
    renderer = SummaryRenderer()
    renderer.render_subscription(sub)

    if sync_now:
        result = ctx.app.engine.sync(sub)
        renderer.render_sync_results([result], {sub.id: sub.display_name})
        if not result.ok:
            raise typer.Exit(1)


@subscribe_app.command("ls")
def ls() -> None:
    """List subscriptions and their last sync outcome."""
    ctx = get_context()
    TableRenderer().render_subscriptions(ctx.app.subscription_manager.list(ctx.owner_id))


@subscribe_app.command("edit")
def edit(
    subscription_id: Annotated[str, typer.Argument(help="Subscription ID (prefix ok)")],
    url: Annotated[str | None, typer.Option("--url", help="New feed URL")] = None,
    name: Annotated[str | None, typer.Option("--name", "-n", help="New display name")] = None,
    color: Annotated[str | None, typer.Option("--color", "-c", help="New color")] = None,
    interval: Annotated[
        int | None,
        typer.Option("--interval", "-i", min=1, help="Minutes between automatic syncs"),
    ] = None,
    auto_sync: Annotated[
        bool | None,
        typer.Option("--auto-sync/--no-auto-sync", help="Enable or disable background sync"),
    ] = None,
) -> None:
    """Edit a subscription."""
    ctx = get_context()
    sub_id = resolve_subscription_id(subscription_id)
    try:
        sub = ctx.app.subscription_manager.update(
            ctx.owner_id,
            sub_id,
            remote_url=url,
            display_name=name,
            color=color,
            sync_interval_minutes=interval,
            auto_sync_enabled=auto_sync,
        )
    except CalendarError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    console.print("[green]✓[/green] Updated")
    SummaryRenderer().render_subscription(sub)


@subscribe_app.command("rm")
def rm(
    subscription_id: Annotated[str, typer.Argument(help="Subscription ID (prefix ok)")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation prompt")] = False,
) -> None:
    """Remove a subscription and all events it imported."""
    ctx = get_context()
    manager = ctx.app.subscription_manager
    sub_id = resolve_subscription_id(subscription_id)
    sub = manager.get(ctx.owner_id, sub_id)

    if not force:
        console.print(f"\nRemove subscription '{sub.display_name}'")
        console.print("  All events imported from this feed will be deleted.\n")
    confirm_or_exit("Continue?", force)

    removed = manager.delete(ctx.owner_id, sub_id)
    console.print(
        f"[green]✓[/green] Removed subscription '{sub.display_name}' and {removed} events"
    )
