#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import os
import sys
from signal import SIGINT, signal
from threading import Event
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from coral_counts import __version__
from coral_counts.app import recount_site
from coral_counts.config import (
    DEFAULT_BATCH_SIZE,
    ConfigurationError,
    MissingConfigurationError,
    MongoConfig,
    RecountConfig,
    configure_logging,
    env_flag,
    parse_duration,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_CANCEL = Event()


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def _duration(value: str) -> float:
    try:
        seconds = parse_duration(value)
    except ConfigurationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value!r}")
    return seconds


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="coral-counts",
        description="Recompute story, site and user comment counts after an import",
    )
    parser.add_argument(
        "--tenant-id",
        default=os.getenv("TENANT_ID"),
        help="ID for the tenant we're refreshing counts on (env: TENANT_ID)",
    )
    parser.add_argument(
        "--site-id",
        default=os.getenv("SITE_ID"),
        help="ID for the site we're refreshing counts on (env: SITE_ID)",
    )
    parser.add_argument(
        "--mongodb-uri",
        default=os.getenv("MONGODB_URI"),
        help="URI of the MongoDB database, including the database name (env: MONGODB_URI)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=env_flag("DRY_RUN"),
        help="Compute counts without writing anything to the database (env: DRY_RUN)",
    )
    parser.add_argument(
        "--disable-watcher",
        action="store_true",
        default=env_flag("DISABLE_WATCHER"),
        help="Do not watch for concurrent changes; run a single full pass (env: DISABLE_WATCHER)",
    )
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=os.getenv("BATCH_SIZE", str(DEFAULT_BATCH_SIZE)),
        help="Number of updates per bulk write (default: %(default)s, env: BATCH_SIZE)",
    )
    parser.add_argument(
        "--connect-timeout",
        type=_duration,
        default=os.getenv("MONGODB_CONNECT_TIMEOUT", "1m"),
        help="Timeout for connecting to MongoDB, e.g. 30s or 1m (env: MONGODB_CONNECT_TIMEOUT)",
    )
    parser.add_argument(
        "--strict-status",
        action="store_true",
        default=env_flag("STRICT_STATUS"),
        help="Fail on comments with an unknown status instead of ignoring them",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(list(argv))
    missing = [
        flag
        for flag, value in (
            ("--mongodb-uri (MONGODB_URI)", args.mongodb_uri),
            ("--site-id (SITE_ID)", args.site_id),
            ("--tenant-id (TENANT_ID)", args.tenant_id),
        )
        if not value
    ]
    if missing:
        raise MissingConfigurationError(missing)
    return args


def _build_config(args: argparse.Namespace) -> RecountConfig:
    return RecountConfig(
        tenant_id=args.tenant_id,
        site_id=args.site_id,
        mongo=MongoConfig.from_uri(args.mongodb_uri, connect_timeout_seconds=args.connect_timeout),
        dry_run=args.dry_run,
        disable_watcher=args.disable_watcher,
        batch_size=args.batch_size,
        strict_statuses=args.strict_status,
    )


def main(argv: Sequence[str] | None = None, *, cancel: Event | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        config = _build_config(_parse_args(args_list))
    except ConfigurationError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = recount_site(config, cancel=cancel or _CANCEL)
    except Exception:
        log.exception("Fatal error during recount")
        sys.exit(1)

    if result.cancelled:
        log.warning("Recount cancelled before the counts converged")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C): stop after the current pass, exit on a second press."""
    if _CANCEL.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(0)
    log.info("Cancelling after the current pass, press Ctrl+C again to exit now")
    _CANCEL.set()


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
