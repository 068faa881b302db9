"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CommentStatus(StrEnum):
    APPROVED = "APPROVED"
    NONE = "NONE"
    PREMOD = "PREMOD"
    REJECTED = "REJECTED"
    SYSTEM_WITHHELD = "SYSTEM_WITHHELD"

    @classmethod
    def parse(cls, value: str | None) -> CommentStatus | None:
        """Return the matching status, or ``None`` for values this tool does not know."""

        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class EntityKind(StrEnum):
    """Aggregate kinds written by a recount; values double as collection names."""

    STORIES = "stories"
    SITES = "sites"
    USERS = "users"


class OperationType(StrEnum):
    INSERT = "insert"
    UPDATE = "update"


WATCHED_OPERATIONS: frozenset[OperationType] = frozenset(OperationType)

# Action key whose presence puts an unmoderated comment in the reported queue.
FLAG_ACTION = "FLAG"
