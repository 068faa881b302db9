"""Records read and written by a recount."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .counts import CommentCounts, UserCommentCounts

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .enums import CommentStatus, OperationType


@dataclass(frozen=True, slots=True)
class Comment:
    """Source-of-truth comment; never mutated by this tool.

    ``status`` is ``None`` when the stored value is missing or not one of the known
    statuses. ``author_id`` is ``None`` when the comment has no author.
    """

    story_id: str
    author_id: str | None
    status: CommentStatus | None
    action_counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class Story:
    id: str
    comment_counts: CommentCounts = field(default_factory=CommentCounts)


@dataclass(slots=True)
class Site:
    id: str
    comment_counts: CommentCounts = field(default_factory=CommentCounts)


@dataclass(slots=True)
class User:
    id: str
    comment_counts: UserCommentCounts = field(default_factory=UserCommentCounts)


@dataclass(frozen=True, slots=True)
class EntityKey:
    """Sink key; ``site_id`` is ``None`` for entities not scoped to a site (users, sites)."""

    tenant_id: str
    id: str
    site_id: str | None = None


@dataclass(frozen=True, slots=True)
class CountsUpsert:
    key: EntityKey
    counts: CommentCounts | UserCommentCounts


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A comment insert/update delivered by the change feed."""

    operation_type: OperationType | str
    comment_id: str | None
    tenant_id: str
    site_id: str
    story_id: str
    author_id: str | None


@dataclass(frozen=True, slots=True)
class DirtyKeys:
    """Distinct ids touched since the previous drain, in first-seen order."""

    story_ids: tuple[str, ...] = ()
    user_ids: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.story_ids or self.user_ids)
