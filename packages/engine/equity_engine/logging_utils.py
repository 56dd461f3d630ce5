"""Logging configuration helpers for the equity engine."""
from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "EQUITY_ENGINE_LOG_LEVEL"


def coerce_level(level: str | int) -> int:
    """Translate a user provided level into a numeric log level."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Configure the root logger for console output.

    The level defaults to the ``EQUITY_ENGINE_LOG_LEVEL`` environment variable,
    then to INFO. An unrecognised level also falls back to INFO. ``force``
    mirrors :func:`logging.basicConfig` and replaces existing handlers.
    """

    requested = level if level is not None else os.getenv(LOG_LEVEL_ENV, "INFO")
    try:
        resolved_level = coerce_level(requested)
    except ValueError:
        resolved_level = logging.INFO

    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved_level)
        return

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=force,
    )


__all__ = ["configure_logging", "coerce_level", "LOG_LEVEL_ENV"]
