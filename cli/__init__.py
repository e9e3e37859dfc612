"""CLI package for the calendar sync tool."""

import logging
import sys

from icalsync.config import SyncConfig


def setup_logging(
    verbose: bool = False, quiet: bool = False, config: SyncConfig | None = None
) -> None:
    """Configure logging with separate formatters for file and console.

    Args:
        verbose: If True, set console to INFO level
        quiet: If True, set console to ERROR level only
        config: Optional SyncConfig for log directory/filename settings
    """
    if config is None:
        config = SyncConfig.from_env()

    # File formatter: includes timestamp and logger name
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")

    config.log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(config.log_dir / config.log_filename)
    file_handler.setFormatter(file_formatter)
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)

    if quiet:
        console_handler.setLevel(logging.ERROR)
    elif verbose:
        console_handler.setLevel(logging.INFO)
    else:
        # Default: warnings and errors only
        console_handler.setLevel(logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # urllib3 debug lines would flood the log file on every feed fetch
    logging.getLogger("urllib3").setLevel(logging.INFO)


def main() -> None:
    """Main entry point for the CLI."""
    from cli.main import app

    app()


__all__ = ["main", "setup_logging"]
