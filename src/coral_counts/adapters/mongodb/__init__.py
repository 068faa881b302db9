"""MongoDB adapter package."""

from __future__ import annotations

from .change_feed import MongoChangeFeed, MongoChangeStream, change_stream_pipeline
from .client import MongoDatabase, close_client, connect, open_database
from .sink import MongoCountsSink, key_filter
from .source import MongoCommentSource, comment_filter

__all__ = [
    "MongoChangeFeed",
    "MongoChangeStream",
    "MongoCommentSource",
    "MongoCountsSink",
    "MongoDatabase",
    "change_stream_pipeline",
    "close_client",
    "comment_filter",
    "connect",
    "key_filter",
    "open_database",
]
