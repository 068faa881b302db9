"""Bulk writer of recomputed counts into the stories, sites and users collections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from pymongo import UpdateOne
from pymongo.errors import BulkWriteError, PyMongoError

from coral_counts.domain.model import EntityKind
from coral_counts.domain.ports import BulkWriteOutcome
from coral_counts.domain.recount.errors import FlushError

from .translator import comment_counts_document

if TYPE_CHECKING:
    from collections.abc import Sequence

    from coral_counts.domain.model import CountsUpsert, EntityKey

    from .client import MongoDatabase

# Stories and users are looked up through their (tenantID, id) index.
TENANT_ID_HINT: Final[list[tuple[str, int]]] = [("tenantID", 1), ("id", 1)]
_HINTED_KINDS: Final[frozenset[EntityKind]] = frozenset({EntityKind.STORIES, EntityKind.USERS})


def key_filter(key: EntityKey) -> dict[str, str]:
    filter_ = {"tenantID": key.tenant_id}
    if key.site_id is not None:
        filter_["siteID"] = key.site_id
    filter_["id"] = key.id
    return filter_


class MongoCountsSink:
    def __init__(self, database: MongoDatabase, *, use_index_hint: bool = True) -> None:
        self.database = database
        self.use_index_hint = use_index_hint

    def operation(self, kind: EntityKind, upsert: CountsUpsert) -> UpdateOne:
        hint = TENANT_ID_HINT if self.use_index_hint and kind in _HINTED_KINDS else None
        return UpdateOne(
            key_filter(upsert.key),
            {"$set": {"commentCounts": comment_counts_document(upsert.counts)}},
            hint=hint,
        )

    def bulk_upsert(self, kind: EntityKind, upserts: Sequence[CountsUpsert]) -> BulkWriteOutcome:
        if not upserts:
            return BulkWriteOutcome()

        operations: list[Any] = [self.operation(kind, upsert) for upsert in upserts]
        try:
            result = self.database[kind.value].bulk_write(operations, ordered=False)
        except BulkWriteError as exc:
            errors = exc.details.get("writeErrors", [])
            raise FlushError(
                f"Could not bulk write {kind} updates: {len(errors)} of {len(operations)} failed"
            ) from exc
        except PyMongoError as exc:
            raise FlushError(f"Could not bulk write {kind} updates: {exc}") from exc

        return BulkWriteOutcome(matched=result.matched_count, modified=result.modified_count)
