"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Route the ``tandem`` logger through rich.

    Library code only creates loggers; call this once from the CLI.
    """
    logger = logging.getLogger("tandem")
    logger.handlers.clear()
    logger.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
    )
    logger.setLevel(level.upper())
    logger.propagate = False
