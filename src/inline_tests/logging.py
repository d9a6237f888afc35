"""Console logging for the inline-tests CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


PROJECT_LOGGER = "inline_tests"

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def level_for(verbosity: int) -> int:
    """WARNING by default, INFO at ``-v``, DEBUG at ``-vv`` and above."""
    if verbosity <= 0:
        return logging.WARNING
    return _LEVELS.get(verbosity, logging.DEBUG)


def configure_logging(verbosity: int = 0, console: Console | None = None) -> RichHandler:
    """Attach a stderr RichHandler to the project logger.

    Replaces any handler installed by a previous call, so repeated CLI
    invocations in one process do not duplicate output.
    """
    level = level_for(verbosity)
    handler = RichHandler(
        console=console or Console(stderr=True),
        level=level,
        show_time=False,
        show_path=level <= logging.DEBUG,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(PROJECT_LOGGER)
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
