"""Bounded, unordered bulk writes of recomputed aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from coral_counts.domain.model import CountsUpsert, EntityKind
    from coral_counts.domain.ports import CountsSink

DEFAULT_BATCH_SIZE: Final[int] = 1000

log = getLogger(__name__)


@dataclass(slots=True)
class WriteSummary:
    """What a writer did with one stream of upserts.

    ``batches`` counts flushes that reached the sink, ``skipped_batches`` the
    ones a dry run would have written.
    """

    batches: int = 0
    skipped_batches: int = 0
    submitted: int = 0
    skipped: int = 0
    matched: int = 0
    modified: int = 0


class BatchWriter:
    """Flush upserts for one entity kind in batches of at most ``batch_size``.

    Batches are sent one after the other; a failing flush propagates at once and
    leaves earlier batches committed.
    """

    def __init__(
        self,
        sink: CountsSink,
        kind: EntityKind,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        dry_run: bool = False,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.sink = sink
        self.kind = kind
        self.batch_size = batch_size
        self.dry_run = dry_run

    def write(self, upserts: Iterable[CountsUpsert]) -> WriteSummary:
        summary = WriteSummary()
        batch: list[CountsUpsert] = []
        for upsert in upserts:
            batch.append(upsert)
            if len(batch) >= self.batch_size:
                self._flush(batch, summary)
                batch = []

        if batch:
            self._flush(batch, summary)

        return summary

    def _flush(self, batch: list[CountsUpsert], summary: WriteSummary) -> None:
        if self.dry_run:
            summary.skipped_batches += 1
            summary.skipped += len(batch)
            log.info(
                "Not writing bulk %s updates as dry run is enabled: updates=%s",
                self.kind,
                len(batch),
            )
            return

        outcome = self.sink.bulk_upsert(self.kind, tuple(batch))
        summary.batches += 1
        summary.submitted += len(batch)
        summary.matched += outcome.matched
        summary.modified += outcome.modified
        log.info(
            "Wrote bulk %s updates: updates=%s, modified=%s",
            self.kind,
            len(batch),
            outcome.modified,
        )
