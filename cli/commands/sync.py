"""Sync subscriptions with their remote feeds."""

import logging

import typer
from typing_extensions import Annotated

from cli.commands.subscribe import resolve_subscription_id
from cli.context import get_context
from cli.display import SummaryRenderer

logger = logging.getLogger(__name__)


def sync(
    subscription_id: Annotated[
        str | None,
        typer.Argument(help="Subscription ID (prefix ok). Omit to sync everything due."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force", "-f", help="Ignore cached ETag/Last-Modified and download the feed"
        ),
    ] = False,
) -> None:
    """Sync one subscription, or every subscription that is due."""
    ctx = get_context()
    app = ctx.app
    renderer = SummaryRenderer()
    names = {sub.id: sub.display_name for sub in app.subscription_manager.list(ctx.owner_id)}

    if subscription_id is not None:
        sub_id = resolve_subscription_id(subscription_id)
        results = [app.engine.sync_by_id(sub_id, force=force)]
    elif force:
        results = [app.engine.sync(sub, force=True) for sub in app.subscription_manager.list(ctx.owner_id)]
    else:
        results = app.scheduler.run_once()

    renderer.render_sync_results(results, names)
    if any(not result.ok for result in results):
        raise typer.Exit(1)
