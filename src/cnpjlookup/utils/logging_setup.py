"""Utility to provide a shared logger configuration for the project."""

from __future__ import annotations

import logging
import sys
from typing import Final

_LOGGER_NAME: Final = "cnpjlookup"


def setup_logger(level: int | None = None) -> logging.Logger:
    """Return the shared cnpjlookup logger configured for console output.

    The level is only touched when given explicitly, so module-level calls
    do not reset what the CLI configured with ``--verbose``.
    """

    logger = logging.getLogger(_LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    logger.propagate = False

    if not any(isinstance(handler, logging.StreamHandler) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(message)s",
            "%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
