"""Shared CLI context with lazy-initialized dependencies."""

from icalsync.config import SyncConfig
from icalsync.context import AppContext


class CLIContext:
    """Shared context for CLI commands.

    Holds the output flags and a lazily built AppContext, so commands never
    construct stores or services themselves.

    Usage:
        ctx = CLIContext()
        subs = ctx.app.subscription_manager.list(ctx.owner_id)
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        app: AppContext | None = None,
    ):
        """Initialize CLI context.

        Args:
            verbose: If True, show info-level log output
            quiet: If True, suppress non-error output
            app: Optional pre-built AppContext (built from env if None)
        """
        self.verbose = verbose
        self.quiet = quiet
        self._app = app

    @property
    def app(self) -> AppContext:
        """Get application services (lazy-loaded)."""
        if self._app is None:
            self._app = AppContext()
        return self._app

    @property
    def config(self) -> SyncConfig:
        return self.app.config

    @property
    def owner_id(self) -> str:
        """User the CLI acts as."""
        return self.config.default_owner


# Global context instance (set by Typer callback)
_ctx: CLIContext | None = None


def get_context() -> CLIContext:
    """Get the current CLI context.

    Raises:
        RuntimeError: If context not initialized
    """
    if _ctx is None:
        raise RuntimeError("CLI context not initialized. This should not happen.")
    return _ctx


def set_context(ctx: CLIContext) -> None:
    """Set the global CLI context."""
    global _ctx
    _ctx = ctx
