"""MongoDB connection configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final
from urllib.parse import urlsplit

from .errors import ConfigurationError

DEFAULT_CONNECT_TIMEOUT_SECONDS: Final[float] = 60.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS: Final[dict[str, float]] = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


@dataclass(frozen=True, slots=True)
class MongoConfig:
    """Where the comment, story, site and user collections live."""

    uri: str
    database_name: str
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS

    @classmethod
    def from_uri(
        cls,
        uri: str,
        *,
        connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
    ) -> MongoConfig:
        if connect_timeout_seconds <= 0:
            raise ConfigurationError("MongoDB connect timeout must be positive")
        return cls(
            uri=uri,
            database_name=database_name_from_uri(uri),
            connect_timeout_seconds=connect_timeout_seconds,
        )

    @property
    def connect_timeout_ms(self) -> int:
        return int(self.connect_timeout_seconds * 1000)


def database_name_from_uri(uri: str) -> str:
    """Return the database named in the path component of ``uri``."""

    try:
        path = urlsplit(uri).path
    except ValueError as exc:
        raise ConfigurationError(f"Cannot parse the MongoDB URI: {exc}") from exc
    if len(path) < 2:  # noqa: PLR2004
        raise ConfigurationError(
            f"Expected database name in path component of the MongoDB URI, found {path!r}"
        )
    return path[1:]


def parse_duration(value: str) -> float:
    """Parse ``"90"``, ``"1.5"`` or Go-style ``"1m30s"`` / ``"500ms"`` into seconds."""

    text = value.strip()
    if not text:
        raise ConfigurationError("Empty duration")
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(text) or position == 0:
        raise ConfigurationError(f"Invalid duration: {value!r}")
    return total
