"""Comment and story-count readers backed by MongoDB cursors."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from coral_counts.domain.recount.errors import CommentDecodeError, SourceError

from .schema import CommentDocument, StoryDocument
from .translator import translate_comment, translate_story

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from pymongo.cursor import Cursor

    from coral_counts.domain.model import Comment, Story
    from coral_counts.domain.ports import CommentQuery

    from .client import MongoDatabase

COMMENTS_COLLECTION: Final[str] = "comments"
STORIES_COLLECTION: Final[str] = "stories"

COMMENT_PROJECTION: Final[dict[str, int]] = {
    "_id": 0,
    "storyID": 1,
    "authorID": 1,
    "status": 1,
    "actionCounts": 1,
}
STORY_PROJECTION: Final[dict[str, int]] = {"_id": 0, "id": 1, "commentCounts": 1}

log = getLogger(__name__)


def comment_filter(query: CommentQuery) -> dict[str, Any]:
    filter_: dict[str, Any] = {"tenantID": query.tenant_id, "siteID": query.site_id}
    if query.story_ids is not None:
        filter_["storyID"] = {"$in": list(query.story_ids)}
    if query.author_ids is not None:
        filter_["authorID"] = {"$in": list(query.author_ids)}
    return filter_


def close_cursor(cursor: Cursor[dict[str, Any]]) -> None:
    try:
        cursor.close()
    except PyMongoError as exc:
        log.warning("Could not close cursor: %s", exc)


class MongoCommentSource:
    """Implements both the comment source and the story-count source."""

    def __init__(self, database: MongoDatabase, *, strict_statuses: bool = False) -> None:
        self.database = database
        self.strict_statuses = strict_statuses

    @contextmanager
    def comments(self, query: CommentQuery) -> Iterator[Iterator[Comment]]:
        cursor = self.database[COMMENTS_COLLECTION].find(comment_filter(query), COMMENT_PROJECTION)
        try:
            yield self._decode_comments(cursor)
        finally:
            close_cursor(cursor)

    @contextmanager
    def stories(self, tenant_id: str, site_id: str) -> Iterator[Iterator[Story]]:
        cursor = self.database[STORIES_COLLECTION].find(
            {"tenantID": tenant_id, "siteID": site_id},
            STORY_PROJECTION,
        )
        try:
            yield self._decode_stories(cursor)
        finally:
            close_cursor(cursor)

    def _decode_comments(self, documents: Iterable[dict[str, Any]]) -> Iterator[Comment]:
        for raw in _iterate(documents):
            try:
                document = CommentDocument.model_validate(raw)
            except ValidationError as exc:
                raise CommentDecodeError(f"Could not decode comment: {exc}") from exc
            yield translate_comment(document, strict=self.strict_statuses)

    def _decode_stories(self, documents: Iterable[dict[str, Any]]) -> Iterator[Story]:
        for raw in _iterate(documents):
            try:
                document = StoryDocument.model_validate(raw)
            except ValidationError as exc:
                raise CommentDecodeError(f"Could not decode story: {exc}") from exc
            yield translate_story(document)


def _iterate(documents: Iterable[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    iterator = iter(documents)
    while True:
        try:
            raw = next(iterator)
        except StopIteration:
            return
        except PyMongoError as exc:
            raise SourceError(f"Could not iterate on cursor: {exc}") from exc
        yield raw
