"""Logging helpers for geoar."""

from __future__ import annotations

import logging


def get_logger(name: str = "geoar", level: int = logging.INFO) -> logging.Logger:
    """Return a logger with a single stream handler attached.

    Library modules log through ``logging.getLogger(__name__)`` and propagate
    into the ``geoar`` logger, so configuring that one is usually enough.
    """

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
