from __future__ import annotations

import pytest

from coral_counts.domain.model import (
    CommentStatus,
    EntityKind,
    ModerationQueue,
    ModerationQueues,
    StatusCounts,
)
from coral_counts.domain.ports import CommentQuery
from coral_counts.domain.recount import (
    CommentDecodeError,
    RecountContext,
    process_stories,
    process_users,
    scan_stories,
)
from tests.support.fakes import SITE_ID, TENANT_ID, InMemoryCountsStore, make_comment


def _seed(store: InMemoryCountsStore) -> None:
    store.insert(make_comment("s1", author_id="u1", status=CommentStatus.NONE, actions={"FLAG": 1}))
    store.insert(make_comment("s1", author_id="u2", status=CommentStatus.PREMOD))
    store.insert(make_comment("s1", author_id="u1", status=CommentStatus.APPROVED))
    store.insert(make_comment("s2", author_id="u2", status=CommentStatus.REJECTED))
    store.insert(make_comment("s3", author_id="u3"), site_id="other-site")


def test_scan_groups_comments_by_story(store: InMemoryCountsStore) -> None:
    _seed(store)

    stories = scan_stories(store, CommentQuery(tenant_id=TENANT_ID, site_id=SITE_ID))

    assert set(stories) == {"s1", "s2"}
    s1 = stories["s1"]
    assert s1.status == StatusCounts(none=1, premod=1, approved=1)
    assert s1.moderation_queue == ModerationQueue(
        total=2, queues=ModerationQueues(unmoderated=2, reported=1, pending=1)
    )
    assert s1.action == {"FLAG": 1}
    assert stories["s2"].status == StatusCounts(rejected=1)


def test_process_stories_writes_site_scoped_keys(
    store: InMemoryCountsStore, context: RecountContext
) -> None:
    _seed(store)

    result = process_stories(context)

    assert result.kind is EntityKind.STORIES
    assert result.entities == 2
    assert not result.restricted
    assert set(store.story_counts) == {(TENANT_ID, SITE_ID, "s1"), (TENANT_ID, SITE_ID, "s2")}
    assert store.open_readers == 0


def test_restricted_pass_only_touches_listed_stories(
    store: InMemoryCountsStore, context: RecountContext
) -> None:
    _seed(store)

    result = process_stories(context, ["s2"])

    assert result.restricted
    assert list(store.story_counts) == [(TENANT_ID, SITE_ID, "s2")]
    assert store.queries[-1].story_ids == ("s2",)


def test_empty_restriction_never_opens_a_reader(
    store: InMemoryCountsStore, context: RecountContext
) -> None:
    _seed(store)

    result = process_stories(context, [])

    assert result.entities == 0
    assert store.queries == []
    assert store.batches == []


def test_decode_failure_aborts_the_pass_without_writing(
    store: InMemoryCountsStore, context: RecountContext
) -> None:
    _seed(store)
    store.insert_undecodable()

    with pytest.raises(CommentDecodeError):
        process_stories(context)

    assert store.batches == []
    assert store.open_readers == 0


def test_unknown_status_is_counted_as_nothing_but_its_actions(
    store: InMemoryCountsStore, context: RecountContext, caplog: pytest.LogCaptureFixture
) -> None:
    store.insert(make_comment("s1", status=None, actions={"REACTION": 2}))
    store.insert(make_comment("s1", status=CommentStatus.APPROVED))

    with caplog.at_level("WARNING"):
        process_stories(context)

    counts = store.story_counts[(TENANT_ID, SITE_ID, "s1")]
    assert counts.status == StatusCounts(approved=1)
    assert counts.moderation_queue == ModerationQueue()
    assert counts.action == {"REACTION": 2}
    assert "unknown status" in caplog.text


def test_process_users_writes_tenant_keys(
    store: InMemoryCountsStore, context: RecountContext
) -> None:
    _seed(store)

    result = process_users(context)

    assert result.kind is EntityKind.USERS
    assert store.user_counts[(TENANT_ID, "u1")].status == StatusCounts(none=1, approved=1)
    assert store.user_counts[(TENANT_ID, "u2")].status == StatusCounts(premod=1, rejected=1)
    assert (TENANT_ID, "u3") not in store.user_counts


def test_restricted_user_pass(store: InMemoryCountsStore, context: RecountContext) -> None:
    _seed(store)

    process_users(context, ("u2",))

    assert list(store.user_counts) == [(TENANT_ID, "u2")]


def test_repeated_pass_is_idempotent(store: InMemoryCountsStore, context: RecountContext) -> None:
    _seed(store)

    process_stories(context)
    first = {key: counts.copy() for key, counts in store.story_counts.items()}
    second = process_stories(context)

    assert store.story_counts == first
    assert second.write.modified == 0


def test_comment_without_author_counts_for_its_story_only(
    store: InMemoryCountsStore, context: RecountContext, caplog: pytest.LogCaptureFixture
) -> None:
    store.insert(make_comment("s1", author_id=None, status=CommentStatus.NONE))
    store.insert(make_comment("s1", author_id="u1"))

    with caplog.at_level("WARNING"):
        process_stories(context)
        process_users(context)

    story = store.story_counts[(TENANT_ID, SITE_ID, "s1")]
    assert story.status == StatusCounts(none=1, approved=1)
    assert list(store.user_counts) == [(TENANT_ID, "u1")]
    assert "without an author" in caplog.text
