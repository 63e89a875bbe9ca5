"""
app/scheduler/jobs.py

APScheduler-based housekeeping for the in-memory job registry.

Schedule
--------
  evict_finished_jobs: every ``JOB_EVICTION_INTERVAL_SECONDS`` (default 600 s),
  dropping finished jobs untouched for ``JOB_RETENTION_SECONDS`` (default 1 h).

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
It is started and shut down by the FastAPI ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import JobSettings
from app.jobs.registry import JobRegistry
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


def evict_finished_jobs(registry: JobRegistry, retention_seconds: int) -> int:
    """
    Remove finished jobs older than the retention window; returns how many went.
    """

    evicted = registry.evict_older_than(timedelta(seconds=retention_seconds))
    if evicted:
        log_event(
            logger,
            logging.INFO,
            "jobs_evicted",
            evicted=evicted,
            remaining=len(registry),
        )
    return evicted


def build_scheduler(registry: JobRegistry, settings: JobSettings) -> BackgroundScheduler:
    """
    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        evict_finished_jobs,
        trigger="interval",
        seconds=settings.eviction_interval_seconds,
        args=[registry, settings.retention_seconds],
        id="evict_finished_jobs",
        name="Evict finished scrape jobs",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    return scheduler
