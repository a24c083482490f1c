"""Logging setup for command-line runs."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route every ``installer_rewriter`` logger through a Rich handler.

    Worker thread names are kept in the message so interleaved output from
    concurrent units stays attributable.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("[%(threadName)s] %(message)s"))

    root = logging.getLogger("installer_rewriter")
    root.handlers = [handler]
    root.setLevel(level.upper())
    root.propagate = False
