"""Run the HTTP API and background sync scheduler."""

import logging

import typer
from typing_extensions import Annotated

from cli.context import get_context
from cli.display import console
from icalsync import create_app

logger = logging.getLogger(__name__)


def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
    no_scheduler: Annotated[
        bool, typer.Option("--no-scheduler", help="Do not sync subscriptions in the background")
    ] = False,
) -> None:
    """Serve the import/export API and public feeds."""
    ctx = get_context()
    config = ctx.config
    host = host or config.host
    port = port or config.port

    app = create_app(ctx.app)
    scheduler = ctx.app.scheduler
    if not no_scheduler:
        scheduler.start()

    console.print(f"Serving on http://{host}:{port}")
    try:
        app.run(host=host, port=port, use_reloader=False)
    finally:
        if not no_scheduler:
            scheduler.stop(timeout=5)
