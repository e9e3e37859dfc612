"""Table renderer for subscription and feed token lists."""

from rich.markup import escape
from rich.table import Table

from cli.display.console import console
from cli.display.formatters import format_counts, format_relative_time, format_timestamp
from icalsync.models.feed_token import FeedToken
from icalsync.models.subscription import Subscription


class TableRenderer:
    """Render tables for subscriptions and feed tokens.

    Uses Rich's Table class for consistent, well-formatted output.
    """

    def render_subscriptions(self, subscriptions: list[Subscription]) -> None:
        """Render subscriptions with their last sync outcome."""
        if not subscriptions:
            console.print("No subscriptions found")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("ID", style="dim")
        table.add_column("NAME", style="cyan")
        table.add_column("URL")
        table.add_column("AUTO", justify="center")
        table.add_column("EVERY", justify="right", style="dim")
        table.add_column("LAST SYNC", style="dim")
        table.add_column("CHANGES")

        for sub in subscriptions:
            if sub.last_sync_error:
                changes = f"[red]{escape(sub.last_sync_error)}[/red]"
            else:
                changes = format_counts(sub.last_sync_counts)
            table.add_row(
                sub.id[:8],
                escape(sub.display_name),
                escape(sub.remote_url),
                "✓" if sub.auto_sync_enabled else "-",
                f"{sub.sync_interval_minutes}m",
                format_relative_time(sub.last_sync_at),
                changes,
            )

        console.print(table)

    def render_tokens(self, tokens: list[FeedToken]) -> None:
        """Render feed tokens, showing only the token preview."""
        if not tokens:
            console.print("No feed tokens found")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("ID", style="dim")
        table.add_column("NAME", style="cyan")
        table.add_column("TOKEN", style="dim")
        table.add_column("STATUS")
        table.add_column("PRIVATE", justify="center")
        table.add_column("EXPIRES", style="dim")
        table.add_column("HITS", justify="right")
        table.add_column("LAST ACCESS", style="dim")

        for token in tokens:
            status = "[green]active[/green]" if token.is_active else "[red]revoked[/red]"
            table.add_row(
                token.id[:8],
                escape(token.name),
                token.preview,
                status,
                "✓" if token.include_private else "-",
                format_timestamp(token.expires_at),
                str(token.access_count),
                format_relative_time(token.last_accessed_at),
            )

        console.print(table)
