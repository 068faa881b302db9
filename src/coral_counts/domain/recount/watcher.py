"""Change-feed watcher recording which stories and users became dirty.

The watcher consumes the change feed on its own thread and appends the
``(story_id, author_id)`` pair of every matching insert/update to a buffer.
The convergence loop drains that buffer between passes. The buffer is the only
state shared between the two threads; its lock is held for an append or a
swap, never across I/O.
"""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger
from threading import Event, Lock, Thread
from typing import TYPE_CHECKING

from coral_counts.domain.model import WATCHED_OPERATIONS, DirtyKeys

from .errors import WatcherError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from coral_counts.domain.model import ChangeEvent
    from coral_counts.domain.ports import ChangeFeed

log = getLogger(__name__)


class WatcherState(StrEnum):
    INITIALIZING = "initializing"
    READY = "ready"
    WATCHING = "watching"
    STOPPED = "stopped"
    ERRORED = "errored"


class DirtyBuffer:
    """Thread-safe list of touched ``(story_id, author_id)`` pairs."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._pairs: list[tuple[str, str | None]] = []

    def append(self, story_id: str, author_id: str | None) -> None:
        with self._lock:
            self._pairs.append((story_id, author_id))

    def swap(self) -> list[tuple[str, str | None]]:
        """Replace the buffer with an empty one and return what it held."""

        with self._lock:
            pairs, self._pairs = self._pairs, []
        return pairs

    def __len__(self) -> int:
        with self._lock:
            return len(self._pairs)


def dirty_keys_from(pairs: Iterable[tuple[str, str | None]]) -> DirtyKeys | None:
    """Deduplicate story and author ids independently, keeping first-seen order.

    Comments without an author only make their story dirty.
    """

    story_ids: dict[str, None] = {}
    user_ids: dict[str, None] = {}
    for story_id, author_id in pairs:
        story_ids.setdefault(story_id)
        if author_id is not None:
            user_ids.setdefault(author_id)
    if not story_ids and not user_ids:
        return None
    return DirtyKeys(story_ids=tuple(story_ids), user_ids=tuple(user_ids))


class Watcher:
    """Track comments mutated while a recount is running.

    ``start()`` consumes the feed on a daemon thread. The watcher moves through
    ``INITIALIZING -> READY -> WATCHING`` and ends ``STOPPED`` once stopped (or
    once ``cancel`` is set), or ``ERRORED`` if the feed fails. A failure is kept
    and re-raised by ``raise_for_failure()`` and ``wait_ready()``.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        tenant_id: str,
        site_id: str,
        *,
        cancel: Event | None = None,
    ) -> None:
        self.feed = feed
        self.tenant_id = tenant_id
        self.site_id = site_id
        self._cancel = cancel
        self._stop = Event()
        self._settled = Event()
        self._buffer = DirtyBuffer()
        self._state = WatcherState.INITIALIZING
        self._state_lock = Lock()
        self._error: BaseException | None = None
        self._thread: Thread | None = None

    @property
    def state(self) -> WatcherState:
        with self._state_lock:
            return self._state

    @property
    def pending(self) -> int:
        """Number of buffered events not yet drained (duplicates included)."""

        return len(self._buffer)

    @property
    def error(self) -> BaseException | None:
        return self._error

    def _set_state(self, state: WatcherState) -> None:
        with self._state_lock:
            self._state = state
        log.debug("Watcher state changed: state=%s", state)

    def _should_stop(self) -> bool:
        return self._stop.is_set() or (self._cancel is not None and self._cancel.is_set())

    def start(self) -> None:
        if self._thread is not None:
            raise WatcherError("Watcher already started")
        self._thread = Thread(target=self._consume, name="coral-counts-watcher", daemon=True)
        self._thread.start()

    def _consume(self) -> None:
        try:
            with self.feed.open(self.tenant_id, self.site_id) as stream:
                self._set_state(WatcherState.READY)
                self._settled.set()
                log.info(
                    "Watcher is listening for comment changes: tenant_id=%s, site_id=%s",
                    self.tenant_id,
                    self.site_id,
                )
                self._set_state(WatcherState.WATCHING)
                while not self._should_stop():
                    event = stream.try_next()
                    if event is not None:
                        self.record(event)
        except Exception as exc:  # noqa: BLE001
            self._error = exc
            self._set_state(WatcherState.ERRORED)
            log.error("Watcher failed: %s", exc)  # noqa: TRY400
        else:
            self._set_state(WatcherState.STOPPED)
            log.info("Watcher stopped")
        finally:
            self._settled.set()

    def record(self, event: ChangeEvent) -> bool:
        """Buffer ``event`` if it is an insert/update for this tenant and site."""

        if event.operation_type not in WATCHED_OPERATIONS:
            return False
        if event.tenant_id != self.tenant_id or event.site_id != self.site_id:
            return False

        log.debug(
            "A comment has been changed, marking its story as dirty: comment_id=%s, "
            "story_id=%s, operation_type=%s",
            event.comment_id,
            event.story_id,
            event.operation_type,
        )
        self._buffer.append(event.story_id, event.author_id)
        return True

    def drain(self) -> DirtyKeys | None:
        """Take everything buffered since the previous drain; ``None`` if nothing was."""

        return dirty_keys_from(self._buffer.swap())

    def wait_ready(self, timeout: float | None = None) -> None:
        """Block until the subscription is live.

        Raises ``WatcherError`` if the feed failed first or ``timeout`` expired.
        """

        if not self._settled.wait(timeout):
            raise WatcherError(f"Watcher did not become ready within {timeout}s")
        self.raise_for_failure()

    def raise_for_failure(self) -> None:
        if self._error is not None:
            raise WatcherError(f"Change feed watcher failed: {self._error}") from self._error

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the consuming thread; return whether it has finished."""

        if self._thread is None:
            return True
        self._thread.join(timeout)
        if self._thread.is_alive():
            log.warning("Watcher thread did not exit within %ss", timeout)
            return False
        return True
