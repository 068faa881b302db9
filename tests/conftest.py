from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from coral_counts.domain.recount import RecountContext, Watcher
from tests.support.fakes import SITE_ID, TENANT_ID, FakeChangeFeed, InMemoryCountsStore

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def feed() -> FakeChangeFeed:
    return FakeChangeFeed()


@pytest.fixture
def store(feed: FakeChangeFeed) -> InMemoryCountsStore:
    return InMemoryCountsStore(feed=feed)


@pytest.fixture
def context(store: InMemoryCountsStore) -> RecountContext:
    return RecountContext(
        tenant_id=TENANT_ID,
        site_id=SITE_ID,
        comments=store,
        stories=store,
        sink=store,
        batch_size=2,
    )


@pytest.fixture
def watcher(feed: FakeChangeFeed) -> Iterator[Watcher]:
    watcher = Watcher(feed, TENANT_ID, SITE_ID)
    try:
        yield watcher
    finally:
        watcher.stop()
        watcher.join(timeout=2.0)
