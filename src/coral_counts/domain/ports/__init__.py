"""Domain port definitions for adapters."""

from __future__ import annotations

from .change_feed import ChangeFeed, ChangeStream
from .sink import BulkWriteOutcome, CountsSink
from .source import CommentQuery, CommentSource, StoryCountsSource

__all__ = [
    "BulkWriteOutcome",
    "ChangeFeed",
    "ChangeStream",
    "CommentQuery",
    "CommentSource",
    "CountsSink",
    "StoryCountsSource",
]
