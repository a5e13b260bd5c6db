"""Logging configuration.

Library modules log through ``logging.getLogger(__name__)``; the CLI
calls ``setup_logging`` once to route the package logger to the terminal.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "credential_advisor"


def setup_logging(level: int | str = logging.WARNING, console: Console | None = None) -> None:
    """Configure the package logger with a Rich handler.

    Args:
        level: Logging level (name or number)
        console: Console to write to (default: stderr)
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Replace handlers from a previous call
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
