"""Recount engine: passes, batch writer, watcher and convergence loop."""

from __future__ import annotations

from .context import RecountContext
from .convergence import ConvergenceLoop, RecountResult, run_recount
from .errors import (
    ChangeFeedError,
    CommentDecodeError,
    FlushError,
    RecountError,
    SourceError,
    UnknownStatusError,
    WatcherError,
)
from .scanner import PassResult, process_stories, process_users, scan_stories, scan_users
from .site import process_site, reduce_site
from .watcher import DirtyBuffer, Watcher, WatcherState, dirty_keys_from
from .writer import DEFAULT_BATCH_SIZE, BatchWriter, WriteSummary

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "BatchWriter",
    "ChangeFeedError",
    "CommentDecodeError",
    "ConvergenceLoop",
    "DirtyBuffer",
    "FlushError",
    "PassResult",
    "RecountContext",
    "RecountError",
    "RecountResult",
    "SourceError",
    "UnknownStatusError",
    "Watcher",
    "WatcherError",
    "WatcherState",
    "WriteSummary",
    "dirty_keys_from",
    "process_site",
    "process_stories",
    "process_users",
    "reduce_site",
    "run_recount",
    "scan_stories",
    "scan_users",
]
