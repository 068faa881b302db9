"""Counter aggregates maintained on stories, sites and users.

Every counter type is a commutative monoid: ``a + b == b + a``, addition is
associative and the default-constructed value is the identity. ``add`` mutates
in place and is what the scanners use while folding; ``+`` returns a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(slots=True)
class StatusCounts:
    approved: int = 0
    none: int = 0
    premod: int = 0
    rejected: int = 0
    system_withheld: int = 0

    def add(self, other: StatusCounts) -> Self:
        self.approved += other.approved
        self.none += other.none
        self.premod += other.premod
        self.rejected += other.rejected
        self.system_withheld += other.system_withheld
        return self

    def __add__(self, other: StatusCounts) -> StatusCounts:
        return self.copy().add(other)

    def copy(self) -> StatusCounts:
        return StatusCounts(
            approved=self.approved,
            none=self.none,
            premod=self.premod,
            rejected=self.rejected,
            system_withheld=self.system_withheld,
        )

    @property
    def total(self) -> int:
        return self.approved + self.none + self.premod + self.rejected + self.system_withheld


@dataclass(slots=True)
class ModerationQueues:
    unmoderated: int = 0
    reported: int = 0
    pending: int = 0

    def add(self, other: ModerationQueues) -> Self:
        self.unmoderated += other.unmoderated
        self.reported += other.reported
        self.pending += other.pending
        return self


@dataclass(slots=True)
class ModerationQueue:
    """Derived view over status: ``total`` only ever counts unmoderated comments."""

    total: int = 0
    queues: ModerationQueues = field(default_factory=ModerationQueues)

    def add(self, other: ModerationQueue) -> Self:
        self.total += other.total
        self.queues.add(other.queues)
        return self

    def __add__(self, other: ModerationQueue) -> ModerationQueue:
        return self.copy().add(other)

    def copy(self) -> ModerationQueue:
        return ModerationQueue(
            total=self.total,
            queues=ModerationQueues(
                unmoderated=self.queues.unmoderated,
                reported=self.queues.reported,
                pending=self.queues.pending,
            ),
        )


def add_actions(target: dict[str, int], actions: Mapping[str, int]) -> None:
    for key, count in actions.items():
        target[key] = target.get(key, 0) + count


@dataclass(slots=True)
class CommentCounts:
    action: dict[str, int] = field(default_factory=dict)
    status: StatusCounts = field(default_factory=StatusCounts)
    moderation_queue: ModerationQueue = field(default_factory=ModerationQueue)

    def add(self, other: CommentCounts) -> Self:
        add_actions(self.action, other.action)
        self.status.add(other.status)
        self.moderation_queue.add(other.moderation_queue)
        return self

    def __add__(self, other: CommentCounts) -> CommentCounts:
        return self.copy().add(other)

    def copy(self) -> CommentCounts:
        return CommentCounts(
            action=dict(self.action),
            status=self.status.copy(),
            moderation_queue=self.moderation_queue.copy(),
        )

    def action_count(self, key: str) -> int:
        return self.action.get(key, 0)


@dataclass(slots=True)
class UserCommentCounts:
    status: StatusCounts = field(default_factory=StatusCounts)

    def add(self, other: UserCommentCounts) -> Self:
        self.status.add(other.status)
        return self


def merge_counts(counts: Iterable[CommentCounts]) -> CommentCounts:
    """Sum ``counts`` field by field; the result does not depend on iteration order."""

    merged = CommentCounts()
    for item in counts:
        merged.add(item)
    return merged


def actions_equal(left: Mapping[str, int], right: Mapping[str, int]) -> bool:
    """Compare action tallies treating an absent key as zero."""

    return {k: v for k, v in left.items() if v} == {k: v for k, v in right.items() if v}
