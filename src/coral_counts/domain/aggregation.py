"""Pure folding rules turning comments into counter increments.

The status and moderation-queue rules are separate functions so that the
derivation of the moderation queue from the status can be checked on its own.
Nothing here performs I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from coral_counts.domain.model import (
    FLAG_ACTION,
    CommentCounts,
    CommentStatus,
    ModerationQueue,
    ModerationQueues,
    StatusCounts,
    UserCommentCounts,
)
from coral_counts.domain.model.counts import add_actions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from coral_counts.domain.model import Comment


def status_increment(status: CommentStatus | None) -> StatusCounts:
    """Return a delta with exactly one counter set, or all zeros for unknown statuses."""

    match status:
        case CommentStatus.APPROVED:
            return StatusCounts(approved=1)
        case CommentStatus.NONE:
            return StatusCounts(none=1)
        case CommentStatus.PREMOD:
            return StatusCounts(premod=1)
        case CommentStatus.REJECTED:
            return StatusCounts(rejected=1)
        case CommentStatus.SYSTEM_WITHHELD:
            return StatusCounts(system_withheld=1)
        case _:
            return StatusCounts()


def is_reported(action_counts: Mapping[str, int]) -> bool:
    return action_counts.get(FLAG_ACTION, 0) > 0


def moderation_queue_increment(
    status: CommentStatus | None,
    action_counts: Mapping[str, int],
) -> ModerationQueue:
    """Return the moderation-queue delta implied by ``status``.

    Unmoderated comments (``NONE``) count towards ``reported`` when flagged;
    premoderated and system-withheld comments are ``pending``. Approved,
    rejected and unknown comments are outside the queue.
    """

    match status:
        case CommentStatus.NONE:
            reported = 1 if is_reported(action_counts) else 0
            return ModerationQueue(
                total=1,
                queues=ModerationQueues(unmoderated=1, reported=reported),
            )
        case CommentStatus.PREMOD | CommentStatus.SYSTEM_WITHHELD:
            return ModerationQueue(
                total=1,
                queues=ModerationQueues(unmoderated=1, pending=1),
            )
        case _:
            return ModerationQueue()


def action_increment(action_counts: Mapping[str, int]) -> dict[str, int]:
    """Every action tally of the comment, not just whether an action is present."""

    return dict(action_counts)


def comment_contribution(comment: Comment) -> CommentCounts:
    """The full ``CommentCounts`` a single comment adds to its story."""

    return CommentCounts(
        action=action_increment(comment.action_counts),
        status=status_increment(comment.status),
        moderation_queue=moderation_queue_increment(comment.status, comment.action_counts),
    )


def fold_comment(counts: CommentCounts, comment: Comment) -> CommentCounts:
    add_actions(counts.action, action_increment(comment.action_counts))
    counts.status.add(status_increment(comment.status))
    counts.moderation_queue.add(
        moderation_queue_increment(comment.status, comment.action_counts)
    )
    return counts


def fold_user_comment(counts: UserCommentCounts, comment: Comment) -> UserCommentCounts:
    counts.status.add(status_increment(comment.status))
    return counts
