"""Errors raised by recount passes; every one of them ends the run."""

from __future__ import annotations


class RecountError(RuntimeError):
    """Base class for failures surfaced by the recount engine."""


class SourceError(RecountError):
    """Reading comments or story counts from the source failed."""


class CommentDecodeError(RecountError):
    """A record could not be decoded; the pass containing it is abandoned."""


class UnknownStatusError(CommentDecodeError):
    """A comment carried a status this tool does not know (strict mode only)."""

    def __init__(self, status: object) -> None:
        super().__init__(f"Unknown comment status: {status!r}")
        self.status = status


class FlushError(RecountError):
    """A bulk write was rejected by the sink."""


class ChangeFeedError(RecountError):
    """The change feed could not be opened, read or decoded."""


class WatcherError(RecountError):
    """The watcher is not usable for convergence (failed or never became ready)."""
