"""Domain model for comment count aggregates."""

from __future__ import annotations

from .counts import (
    CommentCounts,
    ModerationQueue,
    ModerationQueues,
    StatusCounts,
    UserCommentCounts,
    actions_equal,
    merge_counts,
)
from .entities import (
    ChangeEvent,
    Comment,
    CountsUpsert,
    DirtyKeys,
    EntityKey,
    Site,
    Story,
    User,
)
from .enums import FLAG_ACTION, WATCHED_OPERATIONS, CommentStatus, EntityKind, OperationType

__all__ = [
    "FLAG_ACTION",
    "WATCHED_OPERATIONS",
    "ChangeEvent",
    "Comment",
    "CommentCounts",
    "CommentStatus",
    "CountsUpsert",
    "DirtyKeys",
    "EntityKey",
    "EntityKind",
    "ModerationQueue",
    "ModerationQueues",
    "OperationType",
    "Site",
    "StatusCounts",
    "Story",
    "User",
    "UserCommentCounts",
    "actions_equal",
    "merge_counts",
]
