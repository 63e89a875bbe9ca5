"""
Job service for detached scrape execution and lifecycle tracking.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from fastapi import BackgroundTasks

from app.domain.jobs import Job
from app.domain.nadlan import ScrapeOutcome, ScrapeRequest
from app.jobs.registry import JobRegistry
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

_MAX_ERROR_LENGTH = 2000


class ScrapeRunner(Protocol):
    def scrape(self, request: ScrapeRequest) -> ScrapeOutcome:
        ...


class ScrapeTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


class InlineTaskExecutor:
    """
    Runs the task immediately in the caller's thread (CLI and tests).
    """

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        task(*args, **kwargs)


class ScrapeJobService:
    """
    Creates jobs, schedules the scrape and records its terminal state.
    """

    def __init__(self, *, registry: JobRegistry, scraping_service: ScrapeRunner) -> None:
        self._registry = registry
        self._scraping_service = scraping_service

    def trigger_scrape(self, *, executor: ScrapeTaskExecutor, request: ScrapeRequest) -> Job:
        job = self._registry.create()
        log_event(
            logger,
            logging.INFO,
            "scrape_job_queued",
            job_id=job.id,
            address=request.display_address,
            max_pages=request.max_pages,
        )
        try:
            executor.submit(self._run_scrape_job, job.id, request)
        except Exception:
            self._registry.mark_failed(job.id, "Failed to schedule scrape job.")
            raise
        return job

    def get_job(self, job_id: str) -> Job | None:
        return self._registry.get(job_id)

    def _run_scrape_job(self, job_id: str, request: ScrapeRequest) -> None:
        try:
            if self._registry.mark_running(job_id) is None:
                raise RuntimeError(f"Scrape job not found: {job_id}")
            outcome = self._scraping_service.scrape(request)
            self._registry.mark_done(job_id, outcome)
            log_event(
                logger,
                logging.INFO,
                "scrape_job_done",
                job_id=job_id,
                success=outcome.success,
                deals_scraped=outcome.deals_scraped,
            )
        except Exception as exc:
            self._mark_job_failed(job_id=job_id, exc=exc)

    def _mark_job_failed(self, *, job_id: str, exc: Exception) -> None:
        error_message = str(exc) or type(exc).__name__
        logger.exception("Scrape job failed id=%s error=%s", job_id, error_message)
        log_event(
            logger,
            logging.ERROR,
            "scrape_job_failed",
            job_id=job_id,
            error_type=type(exc).__name__,
            error=error_message,
        )
        if self._registry.mark_failed(job_id, error_message[:_MAX_ERROR_LENGTH]) is None:
            logger.error("Unable to mark scrape job as failed because it was not found id=%s", job_id)
