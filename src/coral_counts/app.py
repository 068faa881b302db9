"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from coral_counts.adapters.mongodb import (
    MongoChangeFeed,
    MongoCommentSource,
    MongoCountsSink,
    open_database,
)
from coral_counts.domain.recount import RecountContext, run_recount

if TYPE_CHECKING:
    from threading import Event

    from coral_counts.config import RecountConfig
    from coral_counts.domain.recount import RecountResult

log = getLogger(__name__)


def recount_site(config: RecountConfig, *, cancel: Event | None = None) -> RecountResult:
    """Recompute story, site and user counts of one site in MongoDB."""

    log.info(
        "Starting recount: tenant_id=%s, site_id=%s, dry_run=%s, watcher=%s, batch_size=%s",
        config.tenant_id,
        config.site_id,
        config.dry_run,
        not config.disable_watcher,
        config.batch_size,
    )
    if config.disable_watcher:
        log.warning("Not starting watcher, changes made during the recount may be missed")

    with open_database(config.mongo) as database:
        source = MongoCommentSource(database, strict_statuses=config.strict_statuses)
        context = RecountContext(
            tenant_id=config.tenant_id,
            site_id=config.site_id,
            comments=source,
            stories=source,
            sink=MongoCountsSink(database),
            batch_size=config.batch_size,
            dry_run=config.dry_run,
        )
        feed = None if config.disable_watcher else MongoChangeFeed(database)
        return run_recount(
            context,
            feed=feed,
            cancel=cancel,
            ready_timeout=config.mongo.connect_timeout_seconds,
        )
