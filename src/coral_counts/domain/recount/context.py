"""Shared collaborators of the passes of one recount."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from coral_counts.domain.ports import CommentQuery

from .writer import DEFAULT_BATCH_SIZE, BatchWriter

if TYPE_CHECKING:
    from collections.abc import Collection

    from coral_counts.domain.model import EntityKind
    from coral_counts.domain.ports import CommentSource, CountsSink, StoryCountsSource


@dataclass(slots=True, kw_only=True)
class RecountContext:
    tenant_id: str
    site_id: str
    comments: CommentSource
    stories: StoryCountsSource
    sink: CountsSink
    batch_size: int = DEFAULT_BATCH_SIZE
    dry_run: bool = False

    def writer(self, kind: EntityKind) -> BatchWriter:
        return BatchWriter(self.sink, kind, batch_size=self.batch_size, dry_run=self.dry_run)

    def query(
        self,
        *,
        story_ids: Collection[str] | None = None,
        author_ids: Collection[str] | None = None,
    ) -> CommentQuery:
        return CommentQuery(
            tenant_id=self.tenant_id,
            site_id=self.site_id,
            story_ids=None if story_ids is None else tuple(story_ids),
            author_ids=None if author_ids is None else tuple(author_ids),
        )
