"""Pydantic models describing the MongoDB documents read and written."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_empty(value: object) -> object:
    return {} if value is None else value


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CommentDocument(MongoBaseModel):
    story_id: str = Field(alias="storyID")
    author_id: str | None = Field(default=None, alias="authorID")
    status: str | None = None
    action_counts: dict[str, int] = Field(default_factory=dict, alias="actionCounts")

    @field_validator("action_counts", mode="before")
    @classmethod
    def _normalize_action_counts(cls, value: object) -> object:
        return _none_to_empty(value)


class StatusCountsDocument(MongoBaseModel):
    approved: int = Field(default=0, alias="APPROVED")
    none: int = Field(default=0, alias="NONE")
    premod: int = Field(default=0, alias="PREMOD")
    rejected: int = Field(default=0, alias="REJECTED")
    system_withheld: int = Field(default=0, alias="SYSTEM_WITHHELD")


class ModerationQueuesDocument(MongoBaseModel):
    unmoderated: int = 0
    reported: int = 0
    pending: int = 0


class ModerationQueueDocument(MongoBaseModel):
    total: int = 0
    queues: ModerationQueuesDocument = Field(default_factory=ModerationQueuesDocument)


class CommentCountsDocument(MongoBaseModel):
    action: dict[str, int] = Field(default_factory=dict)
    status: StatusCountsDocument = Field(default_factory=StatusCountsDocument)
    moderation_queue: ModerationQueueDocument = Field(
        default_factory=ModerationQueueDocument,
        alias="moderationQueue",
    )

    @field_validator("action", mode="before")
    @classmethod
    def _normalize_action(cls, value: object) -> object:
        return _none_to_empty(value)


class StoryDocument(MongoBaseModel):
    id: str
    comment_counts: CommentCountsDocument = Field(
        default_factory=CommentCountsDocument,
        alias="commentCounts",
    )


class ChangedCommentDocument(MongoBaseModel):
    id: str | None = None
    tenant_id: str = Field(alias="tenantID")
    site_id: str = Field(alias="siteID")
    story_id: str = Field(alias="storyID")
    author_id: str | None = Field(default=None, alias="authorID")


class ChangeEventDocument(MongoBaseModel):
    operation_type: str = Field(alias="operationType")
    full_document: ChangedCommentDocument = Field(alias="fullDocument")
