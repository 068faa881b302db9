"""Story and user passes: fold comments into per-entity counts and write them."""

from __future__ import annotations

import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from coral_counts.domain.aggregation import fold_comment, fold_user_comment
from coral_counts.domain.model import (
    CommentCounts,
    CountsUpsert,
    EntityKey,
    EntityKind,
    UserCommentCounts,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from coral_counts.domain.ports import CommentQuery, CommentSource

    from .context import RecountContext
    from .writer import WriteSummary

log = getLogger(__name__)


@dataclass(slots=True)
class PassResult:
    kind: EntityKind
    entities: int
    write: WriteSummary
    restricted: bool = False
    seconds: float = 0.0


def _warn_unknown(ignored: int, query: CommentQuery) -> None:
    if ignored:
        log.warning(
            "Ignored %s comments with an unknown status: tenant_id=%s, site_id=%s",
            ignored,
            query.tenant_id,
            query.site_id,
        )


def scan_stories(source: CommentSource, query: CommentQuery) -> dict[str, CommentCounts]:
    """Fold every comment matched by ``query`` into counts keyed by story id.

    Nothing is returned if reading fails part-way; the reader is released either way.
    """

    stories: dict[str, CommentCounts] = {}
    if query.matches_nothing:
        return stories

    ignored = 0
    with source.comments(query) as comments:
        for comment in comments:
            counts = stories.get(comment.story_id)
            if counts is None:
                counts = stories[comment.story_id] = CommentCounts()
            fold_comment(counts, comment)
            if comment.status is None:
                ignored += 1

    _warn_unknown(ignored, query)
    return stories


def scan_users(source: CommentSource, query: CommentQuery) -> dict[str, UserCommentCounts]:
    """Fold every comment matched by ``query`` into status counts keyed by author id."""

    users: dict[str, UserCommentCounts] = {}
    if query.matches_nothing:
        return users

    ignored = 0
    anonymous = 0
    with source.comments(query) as comments:
        for comment in comments:
            if comment.author_id is None:
                anonymous += 1
                continue
            counts = users.get(comment.author_id)
            if counts is None:
                counts = users[comment.author_id] = UserCommentCounts()
            fold_user_comment(counts, comment)
            if comment.status is None:
                ignored += 1

    _warn_unknown(ignored, query)
    if anonymous:
        log.warning(
            "Skipped %s comments without an author: tenant_id=%s, site_id=%s",
            anonymous,
            query.tenant_id,
            query.site_id,
        )
    return users


def process_stories(
    context: RecountContext,
    story_ids: Collection[str] | None = None,
) -> PassResult:
    """Recompute and write the counts of all stories, or only of ``story_ids``."""

    started = time.monotonic()
    log.info(
        "Loading stories from comments: site_id=%s, restricted_to=%s",
        context.site_id,
        "all" if story_ids is None else len(story_ids),
    )
    stories = scan_stories(context.comments, context.query(story_ids=story_ids))
    log.info(
        "Loaded stories from comments: stories=%s, took=%.3fs",
        len(stories),
        time.monotonic() - started,
    )

    summary = context.writer(EntityKind.STORIES).write(
        CountsUpsert(
            key=EntityKey(tenant_id=context.tenant_id, site_id=context.site_id, id=story_id),
            counts=counts,
        )
        for story_id, counts in stories.items()
    )
    return PassResult(
        kind=EntityKind.STORIES,
        entities=len(stories),
        write=summary,
        restricted=story_ids is not None,
        seconds=time.monotonic() - started,
    )


def process_users(
    context: RecountContext,
    author_ids: Collection[str] | None = None,
) -> PassResult:
    """Recompute and write the status counts of all authors, or only of ``author_ids``."""

    started = time.monotonic()
    log.info(
        "Loading users from comments: site_id=%s, restricted_to=%s",
        context.site_id,
        "all" if author_ids is None else len(author_ids),
    )
    users = scan_users(context.comments, context.query(author_ids=author_ids))
    log.info(
        "Loaded users from comments: users=%s, took=%.3fs",
        len(users),
        time.monotonic() - started,
    )

    summary = context.writer(EntityKind.USERS).write(
        CountsUpsert(key=EntityKey(tenant_id=context.tenant_id, id=user_id), counts=counts)
        for user_id, counts in users.items()
    )
    return PassResult(
        kind=EntityKind.USERS,
        entities=len(users),
        write=summary,
        restricted=author_ids is not None,
        seconds=time.monotonic() - started,
    )
