"""CLI command implementations."""

from cli.commands.export import export
from cli.commands.ingest import import_command
from cli.commands.serve import serve
from cli.commands.subscribe import subscribe_app
from cli.commands.sync import sync
from cli.commands.token import token_app

__all__ = [
    "export",
    "import_command",
    "serve",
    "subscribe_app",
    "sync",
    "token_app",
]
