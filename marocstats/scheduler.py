"""Background scheduler for periodic data reloads.

Uses APScheduler to rebuild the data context from its sources.
Activated by setting MAROCSTATS_RELOAD_INTERVAL (hours).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from marocstats.context import DataContext
from marocstats.ingestion.sources import MissingInputError
from marocstats.pipeline import load_context_sync

logger = logging.getLogger(__name__)

_last_run: datetime | None = None


def get_last_run() -> datetime | None:
    return _last_run


def reload_job(on_loaded: Callable[[DataContext], None]) -> bool:
    """Build a new context and hand it to *on_loaded*; keep the old one on failure."""
    global _last_run
    logger.info("Scheduled reload starting ...")
    try:
        context = load_context_sync()
    except MissingInputError:
        logger.exception("Scheduled reload failed, keeping the current data")
        return False
    on_loaded(context)
    _last_run = datetime.now(timezone.utc)
    logger.info("Scheduled reload complete: %s", context.summary())
    return True


def start_scheduler(
    interval_hours: float | None,
    on_loaded: Callable[[DataContext], None],
) -> BackgroundScheduler | None:
    """Start the background scheduler if an interval is configured."""
    if not interval_hours:
        logger.info("Scheduler not configured (set MAROCSTATS_RELOAD_INTERVAL)")
        return None

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        reload_job, "interval", hours=interval_hours, id="data_reload", args=[on_loaded]
    )
    scheduler.start()
    logger.info("Scheduler started — data reloads every %.1f hours", interval_hours)
    return scheduler
