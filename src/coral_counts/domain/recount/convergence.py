"""Full recount followed by targeted re-runs until the watcher goes quiet.

A comment written while a pass is running may or may not be seen by that pass.
Every such write is also delivered to the watcher, so re-running the passes for
the drained ids after each round catches it; once writes stop, a drain comes
back empty and the stored counts match the comments.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from threading import Event
from typing import TYPE_CHECKING, TypeAlias

from .scanner import process_stories, process_users
from .site import process_site
from .watcher import Watcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from coral_counts.domain.model import DirtyKeys
    from coral_counts.domain.ports import ChangeFeed

    from .context import RecountContext
    from .scanner import PassResult

    Step: TypeAlias = Callable[[], PassResult]

WATCHER_STOP_TIMEOUT_SECONDS = 30.0

log = getLogger(__name__)


@dataclass(slots=True)
class RecountResult:
    passes: list[PassResult] = field(default_factory=list)
    rounds: int = 0
    converged: bool = False
    cancelled: bool = False
    seconds: float = 0.0


class ConvergenceLoop:
    """Drive the story, site and user passes for one site.

    Without a watcher exactly one full pass runs. With one, the loop keeps
    draining it and re-processing the dirty ids; there is no iteration cap, so
    it only ends once writes to the site's comments stop (or on cancellation).
    """

    def __init__(
        self,
        context: RecountContext,
        watcher: Watcher | None = None,
        *,
        cancel: Event | None = None,
    ) -> None:
        self.context = context
        self.watcher = watcher
        self.cancel = cancel or Event()

    def run(self) -> RecountResult:
        started = time.monotonic()
        result = RecountResult()

        if self._execute(self._full_pass(), result):
            if self.watcher is None:
                log.warning("Not watching for changes; finished after a single full pass")
            else:
                self._converge(self.watcher, result)

        result.seconds = time.monotonic() - started
        log.info(
            "Finished processing: rounds=%s, converged=%s, cancelled=%s, took=%.3fs",
            result.rounds,
            result.converged,
            result.cancelled,
            result.seconds,
        )
        return result

    def _converge(self, watcher: Watcher, result: RecountResult) -> None:
        while True:
            if self._cancelled(result):
                return
            watcher.raise_for_failure()
            dirty = watcher.drain()
            if dirty is None:
                # The feed may have died after the check above with nothing buffered.
                watcher.raise_for_failure()
                log.info("No dirty stories or users were found")
                result.converged = True
                return

            result.rounds += 1
            log.info(
                "Recalculating dirty documents: round=%s, stories=%s, users=%s",
                result.rounds,
                len(dirty.story_ids),
                len(dirty.user_ids),
            )
            if not self._execute(self._targeted_pass(dirty), result):
                return

    def _full_pass(self) -> list[Step]:
        context = self.context
        return [
            lambda: process_stories(context),
            lambda: process_site(context),
            lambda: process_users(context),
        ]

    def _targeted_pass(self, dirty: DirtyKeys) -> list[Step]:
        context = self.context
        steps: list[Step] = []
        if dirty.story_ids:
            steps.append(lambda: process_stories(context, dirty.story_ids))
            steps.append(lambda: process_site(context))
        if dirty.user_ids:
            steps.append(lambda: process_users(context, dirty.user_ids))
        return steps

    def _execute(self, steps: list[Step], result: RecountResult) -> bool:
        """Run ``steps`` in order, stopping before the next one once cancelled."""

        for step in steps:
            if self._cancelled(result):
                return False
            result.passes.append(step())
        return True

    def _cancelled(self, result: RecountResult) -> bool:
        if self.cancel.is_set():
            if not result.cancelled:
                log.warning("Recount cancelled; no further passes will be started")
            result.cancelled = True
        return result.cancelled


def run_recount(
    context: RecountContext,
    *,
    feed: ChangeFeed | None = None,
    cancel: Event | None = None,
    ready_timeout: float | None = None,
) -> RecountResult:
    """Recount one site, watching ``feed`` for concurrent writes when given.

    The watcher is started and confirmed live before the first pass reads any
    comment, and is stopped again however the run ends.
    """

    cancel = cancel or Event()
    if feed is None:
        return ConvergenceLoop(context, cancel=cancel).run()

    watcher = Watcher(feed, context.tenant_id, context.site_id, cancel=cancel)
    log.info("Starting watcher")
    watcher.start()
    try:
        watcher.wait_ready(ready_timeout)
        result = ConvergenceLoop(context, watcher, cancel=cancel).run()
    finally:
        watcher.stop()
        watcher.join(WATCHER_STOP_TIMEOUT_SECONDS)

    # Writes made after the last drain went unseen if the feed failed meanwhile.
    watcher.raise_for_failure()
    return result
