"""Comment change stream used by the watcher."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from coral_counts.domain.model import WATCHED_OPERATIONS
from coral_counts.domain.recount.errors import ChangeFeedError

from .schema import ChangeEventDocument
from .source import COMMENTS_COLLECTION
from .translator import translate_change_event

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pymongo.change_stream import CollectionChangeStream

    from coral_counts.domain.model import ChangeEvent

    from .client import MongoDatabase

DEFAULT_MAX_AWAIT_SECONDS: Final[float] = 1.0

log = getLogger(__name__)


def change_stream_pipeline(tenant_id: str, site_id: str) -> list[dict[str, Any]]:
    return [
        {
            "$match": {
                "operationType": {"$in": sorted(op.value for op in WATCHED_OPERATIONS)},
                "fullDocument.tenantID": tenant_id,
                "fullDocument.siteID": site_id,
            }
        }
    ]


class MongoChangeStream:
    def __init__(self, stream: CollectionChangeStream[dict[str, Any]]) -> None:
        self._stream = stream

    def try_next(self) -> ChangeEvent | None:
        try:
            raw = self._stream.try_next()
        except PyMongoError as exc:
            raise ChangeFeedError(f"Error while processing the change stream: {exc}") from exc
        if raw is None:
            return None
        try:
            document = ChangeEventDocument.model_validate(raw)
        except ValidationError as exc:
            raise ChangeFeedError(f"Could not decode change stream event: {exc}") from exc
        return translate_change_event(document)

    def close(self) -> None:
        try:
            self._stream.close()
        except PyMongoError as exc:
            log.warning("Could not close change stream: %s", exc)


class MongoChangeFeed:
    """Watches inserts and updates on the comments collection.

    ``try_next`` waits at most ``max_await_seconds`` for the server, which bounds
    how long the watcher takes to notice it was stopped.
    """

    def __init__(
        self,
        database: MongoDatabase,
        *,
        max_await_seconds: float = DEFAULT_MAX_AWAIT_SECONDS,
    ) -> None:
        self.database = database
        self.max_await_seconds = max_await_seconds

    @contextmanager
    def open(self, tenant_id: str, site_id: str) -> Iterator[MongoChangeStream]:
        try:
            stream = self.database[COMMENTS_COLLECTION].watch(
                change_stream_pipeline(tenant_id, site_id),
                full_document="updateLookup",
                max_await_time_ms=int(self.max_await_seconds * 1000),
            )
        except PyMongoError as exc:
            raise ChangeFeedError(f"Could not watch the change stream: {exc}") from exc

        change_stream = MongoChangeStream(stream)
        try:
            yield change_stream
        finally:
            change_stream.close()
