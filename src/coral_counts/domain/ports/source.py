"""Ports for reading comments and persisted story counts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator
    from contextlib import AbstractContextManager

    from coral_counts.domain.model import Comment, Story


@dataclass(frozen=True, slots=True)
class CommentQuery:
    """Comments of one tenant/site, optionally restricted to some stories or authors.

    ``None`` means unrestricted; an empty tuple matches no comment at all.
    """

    tenant_id: str
    site_id: str
    story_ids: tuple[str, ...] | None = None
    author_ids: tuple[str, ...] | None = None

    @property
    def matches_nothing(self) -> bool:
        return self.story_ids == () or self.author_ids == ()


@runtime_checkable
class CommentSource(Protocol):
    """Streams comments; the reader is released when the context exits."""

    def comments(self, query: CommentQuery) -> AbstractContextManager[Iterator[Comment]]: ...


@runtime_checkable
class StoryCountsSource(Protocol):
    """Streams the persisted counts of every story of a site."""

    def stories(self, tenant_id: str, site_id: str) -> AbstractContextManager[Iterator[Story]]: ...


__all__ = ["CommentQuery", "CommentSource", "StoryCountsSource"]
