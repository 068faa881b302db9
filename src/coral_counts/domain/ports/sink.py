"""Ports for persisting recomputed aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from coral_counts.domain.model import CountsUpsert, EntityKind


@dataclass(frozen=True, slots=True)
class BulkWriteOutcome:
    matched: int = 0
    modified: int = 0


@runtime_checkable
class CountsSink(Protocol):
    """Applies independent keyed updates as one unordered bulk operation."""

    def bulk_upsert(self, kind: EntityKind, upserts: Sequence[CountsUpsert]) -> BulkWriteOutcome: ...


__all__ = ["BulkWriteOutcome", "CountsSink"]
