"""Logging utilities for lazyfetch.

The library only ever logs through ``logging.getLogger(__name__)``. These
helpers are for applications that want the records rendered with Rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "lazyfetch"


def setup_logging(
    level: int = logging.INFO,
    trace_dispatch: bool = False,
    console: Console | None = None,
    date_format: str = "[%X]",
) -> logging.Logger:
    """Configures the lazyfetch logger with a RichHandler.

    Should be called by the application, not by the library during import.
    Calling it again replaces the handler installed by the previous call.

    Args:
        level: The logging level for the 'lazyfetch' namespace.
        trace_dispatch: Also emit the DEBUG records of the transport layer
            (one record when a call is dispatched, one with its duration).
        console: Rich console to write to. Defaults to stderr.
        date_format: The date format string. Defaults to "[%X]".

    Returns:
        The configured 'lazyfetch' logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates if called multiple times
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)

    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt=date_format))
    logger.addHandler(handler)

    transport_logger = logging.getLogger(f"{LOGGER_NAME}.transport")
    transport_logger.setLevel(logging.DEBUG if trace_dispatch else logging.NOTSET)

    # Prevent propagation to the root logger to avoid duplicate logs.
    logger.propagate = False
    return logger
