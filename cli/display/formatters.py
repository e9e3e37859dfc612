"""Pure formatting functions for display output."""

from datetime import datetime, timezone

from icalsync.models.subscription import SyncCounts


def format_relative_time(ms: int | None, now: datetime | None = None) -> str:
    """Format an epoch-ms instant as relative time.

    Args:
        ms: Instant in epoch milliseconds, or None.
        now: Reference time (defaults to current UTC time).

    Returns:
        Formatted time string (e.g., "2h ago", "1w ago", "never").
    """
    if ms is None:
        return "never"

    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    now = now or datetime.now(timezone.utc)
    time_diff = now - dt

    if time_diff.days < 0:
        return "just now"
    if time_diff.days == 0:
        if time_diff.seconds < 60:
            return "just now"
        elif time_diff.seconds < 3600:
            return f"{time_diff.seconds // 60}m ago"
        else:
            return f"{time_diff.seconds // 3600}h ago"
    elif time_diff.days < 7:
        return f"{time_diff.days}d ago"
    elif time_diff.days < 30:
        return f"{time_diff.days // 7}w ago"
    elif time_diff.days < 365:
        return f"{time_diff.days // 30}mo ago"
    else:
        return f"{time_diff.days // 365}y ago"


def format_timestamp(ms: int | None) -> str:
    """Format an epoch-ms instant as local 'YYYY-MM-DD HH:MM', or '-'."""
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def format_counts(counts: SyncCounts | None) -> str:
    """Format sync counts as '+added ~updated -deleted'."""
    if counts is None:
        return "-"
    return f"+{counts.added} ~{counts.updated} -{counts.deleted}"
