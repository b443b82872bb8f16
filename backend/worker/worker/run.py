"""Worker entrypoint: periodic cleanup of rejected content.

Runs the reaper every CLEANUP_INTERVAL_SECONDS. A failing run is logged and
retried on the next tick; `--once` runs a single pass for cron-style
schedulers.
"""

from __future__ import annotations

import argparse
import logging
import time
from typing import Optional

from guestbook.config import configure_logging, get_settings
from guestbook.db import get_engine
from guestbook.reaper import RejectedContentReaper
from guestbook.repo import ContentRepository
from guestbook.storage import SupabaseBlobStore

log = logging.getLogger("worker")


def build_reaper() -> RejectedContentReaper:
    settings = get_settings()
    return RejectedContentReaper(
        ContentRepository(get_engine()),
        SupabaseBlobStore.from_settings(settings),
        retention_days=settings.cleanup_retention_days,
    )


def run_once(reaper: RejectedContentReaper, retention_days: Optional[int] = None) -> bool:
    """Returns True when the pass finished without errors."""
    result = reaper.cleanup(retention_days)
    log.info("Cleanup pass: %d records removed, %d errors", result.cleaned_count, len(result.errors))
    for message in result.errors:
        log.warning("Cleanup error: %s", message)
    return not result.errors


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}")
    if value < 0:
        raise argparse.ArgumentTypeError("must be 0 or greater")
    return value


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Delete rejected content past its retention window.")
    parser.add_argument("--once", action="store_true", help="Run a single pass and exit")
    parser.add_argument("--retention-days", type=_non_negative_int, default=None, help="Override CLEANUP_RETENTION_DAYS")
    args = parser.parse_args(argv)

    configure_logging()
    reaper = build_reaper()

    if args.once:
        return 0 if run_once(reaper, args.retention_days) else 1

    interval = get_settings().cleanup_interval_seconds
    log.info("Worker started (interval=%ss).", interval)
    while True:
        try:
            run_once(reaper, args.retention_days)
        except Exception:
            log.exception("Cleanup pass crashed")
        time.sleep(interval)


if __name__ == "__main__":
    raise SystemExit(main())
