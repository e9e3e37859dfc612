"""Summary renderer for sync and import output."""

from rich.markup import escape

from cli.display.console import console
from cli.display.formatters import format_counts
from icalsync.models.subscription import Subscription
from icalsync.models.sync import ImportResult, SyncResult


class SummaryRenderer:
    """Render results of sync and import commands."""

    def render_header(self, title: str) -> None:
        console.print()
        console.print("━" * 40)
        console.print(f"[bold]  {title}[/bold]")
        console.print("━" * 40)

    def render_sync_results(
        self, results: list[SyncResult], names: dict[str, str] | None = None
    ) -> None:
        """Render one line per sync attempt plus a total.

        Args:
            results: Results returned by the reconciliation engine.
            names: Optional subscription id to display name mapping.
        """
        names = names or {}
        if not results:
            console.print("Nothing to sync")
            return

        for result in results:
            label = escape(names.get(result.subscription_id, result.subscription_id[:8]))
            if not result.ok:
                console.print(f"[red]✗[/red] {label}: {escape(result.error or '')}")
            elif result.not_modified:
                console.print(f"[dim]=[/dim] {label}: not modified")
            else:
                console.print(
                    f"[green]✓[/green] {label}: {format_counts(result.counts)} "
                    f"[dim]({result.duration_ms}ms)[/dim]"
                )

        failed = sum(1 for result in results if not result.ok)
        console.print(f"\n{len(results) - failed} synced, {failed} failed")

    def render_import(self, result: ImportResult) -> None:
        console.print(
            f"[green]✓[/green] Imported {result.imported} events "
            f"({result.skipped} skipped as already present)"
        )

    def render_subscription(self, sub: Subscription) -> None:
        console.print(f"[bold]{escape(sub.display_name)}[/bold] [dim]({sub.id})[/dim]")
        console.print(f"  URL: {escape(sub.remote_url)}")
        console.print(
            f"  Auto-sync: {'on' if sub.auto_sync_enabled else 'off'}, "
            f"every {sub.sync_interval_minutes}m · color {sub.color}"
        )
