"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, resolve_log_level
from .mongodb import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    MongoConfig,
    database_name_from_uri,
    parse_duration,
)
from .recount import DEFAULT_BATCH_SIZE, RecountConfig

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
    "ConfigurationError",
    "MissingConfigurationError",
    "MongoConfig",
    "RecountConfig",
    "configure_logging",
    "database_name_from_uri",
    "env_flag",
    "parse_duration",
    "resolve_log_level",
]
