from __future__ import annotations

from threading import Event

import pytest

from coral_counts.domain.model import ChangeEvent, OperationType
from coral_counts.domain.recount import (
    ChangeFeedError,
    Watcher,
    WatcherError,
    WatcherState,
    dirty_keys_from,
)
from tests.support.fakes import SITE_ID, TENANT_ID, FakeChangeFeed, wait_for


def _event(
    story_id: str = "s1",
    author_id: str = "u1",
    *,
    operation: OperationType | str = OperationType.INSERT,
    tenant_id: str = TENANT_ID,
    site_id: str = SITE_ID,
) -> ChangeEvent:
    return ChangeEvent(
        operation_type=operation,
        comment_id="c1",
        tenant_id=tenant_id,
        site_id=site_id,
        story_id=story_id,
        author_id=author_id,
    )


def test_dirty_keys_are_deduplicated_in_first_seen_order() -> None:
    keys = dirty_keys_from([("s2", "u1"), ("s1", "u1"), ("s2", "u3")])

    assert keys is not None
    assert keys.story_ids == ("s2", "s1")
    assert keys.user_ids == ("u1", "u3")


def test_no_pairs_means_no_dirty_keys() -> None:
    assert dirty_keys_from([]) is None


def test_comment_without_author_only_dirties_its_story() -> None:
    keys = dirty_keys_from([("s1", None), ("s2", "u1")])

    assert keys is not None
    assert keys.story_ids == ("s1", "s2")
    assert keys.user_ids == ("u1",)


def test_record_ignores_other_sites_and_operations(feed: FakeChangeFeed) -> None:
    watcher = Watcher(feed, TENANT_ID, SITE_ID)

    assert watcher.record(_event())
    assert watcher.record(_event(operation=OperationType.UPDATE))
    assert not watcher.record(_event(operation="delete"))
    assert not watcher.record(_event(site_id="other-site"))
    assert not watcher.record(_event(tenant_id="other-tenant"))
    assert watcher.pending == 2


def test_drain_empties_the_buffer(feed: FakeChangeFeed) -> None:
    watcher = Watcher(feed, TENANT_ID, SITE_ID)
    watcher.record(_event("s1", "u1"))
    watcher.record(_event("s1", "u2"))

    dirty = watcher.drain()

    assert dirty is not None
    assert dirty.story_ids == ("s1",)
    assert dirty.user_ids == ("u1", "u2")
    assert watcher.drain() is None


def test_started_watcher_buffers_published_events(
    feed: FakeChangeFeed, watcher: Watcher
) -> None:
    assert watcher.state is WatcherState.INITIALIZING

    watcher.start()
    watcher.wait_ready(timeout=2.0)
    assert watcher.state in {WatcherState.READY, WatcherState.WATCHING}

    feed.publish(_event("s7", "u7"))
    wait_for(lambda: watcher.pending == 1)
    dirty = watcher.drain()
    assert dirty is not None
    assert dirty.story_ids == ("s7",)

    watcher.stop()
    assert watcher.join(timeout=2.0)
    assert watcher.state is WatcherState.STOPPED
    assert feed.closed.is_set()


def test_watcher_cannot_be_started_twice(watcher: Watcher) -> None:
    watcher.start()

    with pytest.raises(WatcherError, match="already started"):
        watcher.start()


def test_open_failure_surfaces_from_wait_ready() -> None:
    feed = FakeChangeFeed(open_error=ChangeFeedError("cannot open change stream"))
    watcher = Watcher(feed, TENANT_ID, SITE_ID)
    watcher.start()

    with pytest.raises(WatcherError) as excinfo:
        watcher.wait_ready(timeout=2.0)

    assert isinstance(excinfo.value.__cause__, ChangeFeedError)
    assert watcher.join(timeout=2.0)
    assert watcher.state is WatcherState.ERRORED


def test_feed_failure_is_kept_for_the_loop(feed: FakeChangeFeed, watcher: Watcher) -> None:
    watcher.start()
    watcher.wait_ready(timeout=2.0)

    feed.fail(ChangeFeedError("stream died"))
    wait_for(lambda: watcher.state is WatcherState.ERRORED)

    assert isinstance(watcher.error, ChangeFeedError)
    with pytest.raises(WatcherError):
        watcher.raise_for_failure()
    assert feed.closed.is_set()


def test_cancel_stops_the_watcher(feed: FakeChangeFeed) -> None:
    cancel = Event()
    watcher = Watcher(feed, TENANT_ID, SITE_ID, cancel=cancel)
    watcher.start()
    watcher.wait_ready(timeout=2.0)

    cancel.set()

    assert watcher.join(timeout=2.0)
    assert watcher.state is WatcherState.STOPPED
    watcher.raise_for_failure()

