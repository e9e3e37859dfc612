"""Typer application and command routing."""

import typer
from typing_extensions import Annotated

from cli import setup_logging
from cli.commands import export, import_command, serve, subscribe_app, sync, token_app
from cli.context import CLIContext, set_context

app = typer.Typer(
    help="Sync remote ICS subscriptions and publish your calendar as a feed.",
    no_args_is_help=True,
)


@app.callback()
def callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show informational log output")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Only show errors")
    ] = False,
) -> None:
    """Set up shared context and logging for every command."""
    ctx = CLIContext(verbose=verbose, quiet=quiet)
    set_context(ctx)
    setup_logging(verbose=verbose, quiet=quiet, config=ctx.config)


app.add_typer(subscribe_app, name="subscribe")
app.add_typer(token_app, name="token")
app.command("sync")(sync)
app.command("import")(import_command)
app.command("export")(export)
app.command("serve")(serve)
