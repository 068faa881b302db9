"""Translate MongoDB documents into domain records and back."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from coral_counts.domain.model import (
    ChangeEvent,
    Comment,
    CommentCounts,
    CommentStatus,
    ModerationQueue,
    ModerationQueues,
    StatusCounts,
    Story,
    UserCommentCounts,
)
from coral_counts.domain.recount.errors import UnknownStatusError

if TYPE_CHECKING:
    from .schema import (
        ChangeEventDocument,
        CommentCountsDocument,
        CommentDocument,
        StatusCountsDocument,
        StoryDocument,
    )


def translate_comment(document: CommentDocument, *, strict: bool = False) -> Comment:
    status = CommentStatus.parse(document.status)
    if status is None and strict:
        raise UnknownStatusError(document.status)
    return Comment(
        story_id=document.story_id,
        author_id=document.author_id,
        status=status,
        action_counts=document.action_counts,
    )


def _translate_status(document: StatusCountsDocument) -> StatusCounts:
    return StatusCounts(
        approved=document.approved,
        none=document.none,
        premod=document.premod,
        rejected=document.rejected,
        system_withheld=document.system_withheld,
    )


def translate_comment_counts(document: CommentCountsDocument) -> CommentCounts:
    queue = document.moderation_queue
    return CommentCounts(
        action=dict(document.action),
        status=_translate_status(document.status),
        moderation_queue=ModerationQueue(
            total=queue.total,
            queues=ModerationQueues(
                unmoderated=queue.queues.unmoderated,
                reported=queue.queues.reported,
                pending=queue.queues.pending,
            ),
        ),
    )


def translate_story(document: StoryDocument) -> Story:
    return Story(id=document.id, comment_counts=translate_comment_counts(document.comment_counts))


def translate_change_event(document: ChangeEventDocument) -> ChangeEvent:
    comment = document.full_document
    return ChangeEvent(
        operation_type=document.operation_type,
        comment_id=comment.id,
        tenant_id=comment.tenant_id,
        site_id=comment.site_id,
        story_id=comment.story_id,
        author_id=comment.author_id,
    )


def status_counts_document(status: StatusCounts) -> dict[str, int]:
    return {
        CommentStatus.APPROVED.value: status.approved,
        CommentStatus.NONE.value: status.none,
        CommentStatus.PREMOD.value: status.premod,
        CommentStatus.REJECTED.value: status.rejected,
        CommentStatus.SYSTEM_WITHHELD.value: status.system_withheld,
    }


def comment_counts_document(counts: CommentCounts | UserCommentCounts) -> dict[str, Any]:
    """Return the ``commentCounts`` sub-document persisted for ``counts``."""

    if isinstance(counts, UserCommentCounts):
        return {"status": status_counts_document(counts.status)}

    queue = counts.moderation_queue
    return {
        "action": dict(counts.action),
        "status": status_counts_document(counts.status),
        "moderationQueue": {
            "total": queue.total,
            "queues": {
                "unmoderated": queue.queues.unmoderated,
                "reported": queue.queues.reported,
                "pending": queue.queues.pending,
            },
        },
    }
