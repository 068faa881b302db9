"""Roll the persisted story counts of a site up into the site document."""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING

from coral_counts.domain.model import CountsUpsert, EntityKey, EntityKind, merge_counts

from .scanner import PassResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from coral_counts.domain.model import CommentCounts, Story

    from .context import RecountContext

log = getLogger(__name__)


def reduce_site(stories: Iterable[Story]) -> CommentCounts:
    return merge_counts(story.comment_counts for story in stories)


def process_site(context: RecountContext) -> PassResult:
    """Re-reduce every story of the site and write the result.

    Always a full reduction: any dirty story changes the site total.
    """

    started = time.monotonic()
    log.info("Loading counts from site stories: site_id=%s", context.site_id)

    story_count = 0

    def _counted(stories: Iterable[Story]) -> Iterable[Story]:
        nonlocal story_count
        for story in stories:
            story_count += 1
            yield story

    with context.stories.stories(context.tenant_id, context.site_id) as stories:
        counts = reduce_site(_counted(stories))

    log.info(
        "Loaded counts from site stories: stories=%s, took=%.3fs",
        story_count,
        time.monotonic() - started,
    )

    summary = context.writer(EntityKind.SITES).write(
        [CountsUpsert(key=EntityKey(tenant_id=context.tenant_id, id=context.site_id), counts=counts)]
    )
    return PassResult(
        kind=EntityKind.SITES,
        entities=1,
        write=summary,
        seconds=time.monotonic() - started,
    )
