import logging

from rich.console import Console
from rich.logging import RichHandler

from pathfinder.config import get_log_level


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr; stdout carries the MCP stdio transport."""
    logging.basicConfig(
        level=level or get_log_level(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
