"""MongoDB client lifecycle."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any, TypeAlias

from pymongo import MongoClient, ReadPreference
from pymongo.errors import PyMongoError

from coral_counts.domain.recount.errors import SourceError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pymongo.database import Database

    from coral_counts.config import MongoConfig

MongoDatabase: TypeAlias = "Database[dict[str, Any]]"

log = getLogger(__name__)


def connect(config: MongoConfig) -> MongoClient[dict[str, Any]]:
    """Connect and make sure the primary answers before any work starts."""

    client: MongoClient[dict[str, Any]] = MongoClient(
        config.uri,
        connectTimeoutMS=config.connect_timeout_ms,
        serverSelectionTimeoutMS=config.connect_timeout_ms,
    )
    try:
        client.admin.command("ping", read_preference=ReadPreference.PRIMARY)
    except PyMongoError as exc:
        close_client(client)
        raise SourceError(f"Cannot ping MongoDB: {exc}") from exc
    log.info("Connected to MongoDB: database=%s", config.database_name)
    return client


def close_client(client: MongoClient[dict[str, Any]]) -> None:
    try:
        client.close()
    except PyMongoError as exc:
        log.warning("Could not disconnect from MongoDB: %s", exc)


@contextmanager
def open_database(config: MongoConfig) -> Iterator[MongoDatabase]:
    client = connect(config)
    try:
        yield client[config.database_name]
    finally:
        close_client(client)
