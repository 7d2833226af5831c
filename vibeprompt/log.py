"""Logging setup for applications embedding vibeprompt."""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "vibeprompt"


def configure_logging(level: str | int = "INFO", console: Console | None = None) -> logging.Logger:
    """
    Attach a RichHandler to the package logger.

    Safe to call more than once: an existing handler is replaced, not
    duplicated. Retry warnings, cache degradation and fallback errors all
    flow through this logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = resolved

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
