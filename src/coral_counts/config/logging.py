"""Root logger setup for the coral-counts CLI."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

# pymongo logs every command and heartbeat at DEBUG.
QUIET_LOGGERS = ("pymongo",)


def resolve_log_level(value: str | None) -> int:
    if value is None or not value.strip():
        return logging.INFO
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Invalid LOG_LEVEL: {value!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger, taking the level from ``LOG_LEVEL`` unless given.

    Library loggers in ``QUIET_LOGGERS`` stay at WARNING whatever the level.
    """

    logging.basicConfig(
        level=resolve_log_level(os.getenv("LOG_LEVEL")) if level is None else level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=force,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
