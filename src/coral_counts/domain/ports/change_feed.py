"""Ports for subscribing to comment mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from coral_counts.domain.model import ChangeEvent


@runtime_checkable
class ChangeStream(Protocol):
    """A live subscription; entering the context of ``ChangeFeed.open`` makes it live."""

    def try_next(self) -> ChangeEvent | None:
        """Return the next event, or ``None`` if none arrived within the poll window."""
        ...


@runtime_checkable
class ChangeFeed(Protocol):
    def open(self, tenant_id: str, site_id: str) -> AbstractContextManager[ChangeStream]: ...


__all__ = ["ChangeFeed", "ChangeStream"]
