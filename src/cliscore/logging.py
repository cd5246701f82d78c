"""Logging setup for the cliscore command line."""

from __future__ import annotations

import logging

_LOGGER_NAME = "cliscore"


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send cliscore log records to stderr; DEBUG with *verbose*, else WARNING."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[cliscore] %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging"]
