"""
In-memory registry tracking scrape jobs through queued/running/done/error.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from app.domain.jobs import ALLOWED_TRANSITIONS, Job, JobStatus
from app.domain.nadlan import ScrapeOutcome

logger = logging.getLogger(__name__)

_PATCHABLE_FIELDS = frozenset({"status", "result", "error"})


class JobRegistry:
    """
    Lock-guarded map of job id to the latest immutable Job snapshot.

    One instance lives for the lifetime of the process (created in the API
    lifespan) and is shared by the HTTP handlers and background tasks.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def create(self) -> Job:
        now = datetime.now(timezone.utc)
        with self._lock:
            job_id = uuid.uuid4().hex
            while job_id in self._jobs:
                job_id = uuid.uuid4().hex
            job = Job(id=job_id, status=JobStatus.QUEUED, created_at=now, updated_at=now)
            self._jobs[job_id] = job
        return job

    def get(self, job_id: str) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id)

    def update(self, job_id: str, **patch: Any) -> Job | None:
        """
        Merge fields into a job and bump updated_at.

        Unknown ids are ignored. A status change that is not a forward
        transition, or a patch that would leave `result` set outside `done`
        or `error` set outside `error`, is logged and leaves the job untouched.
        """

        unknown = set(patch) - _PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported job fields: {', '.join(sorted(unknown))}")

        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None

            new_status = patch.get("status", job.status)
            if job.is_terminal or (
                new_status != job.status and new_status not in ALLOWED_TRANSITIONS[job.status]
            ):
                logger.warning(
                    "Rejected job update id=%s status=%s requested=%s",
                    job_id,
                    job.status,
                    new_status,
                )
                return job

            new_result = patch.get("result", job.result)
            new_error = patch.get("error", job.error)
            if (new_result is not None) != (new_status == JobStatus.DONE) or (
                new_error is not None
            ) != (new_status == JobStatus.ERROR):
                logger.warning(
                    "Rejected job update id=%s status=%s requested=%s has_result=%s has_error=%s",
                    job_id,
                    job.status,
                    new_status,
                    new_result is not None,
                    new_error is not None,
                )
                return job

            updated = replace(job, **patch, updated_at=datetime.now(timezone.utc))
            self._jobs[job_id] = updated
            return updated

    def mark_running(self, job_id: str) -> Job | None:
        return self.update(job_id, status=JobStatus.RUNNING)

    def mark_done(self, job_id: str, result: ScrapeOutcome) -> Job | None:
        return self.update(job_id, status=JobStatus.DONE, result=result, error=None)

    def mark_failed(self, job_id: str, error_message: str) -> Job | None:
        return self.update(job_id, status=JobStatus.ERROR, result=None, error=error_message)

    def evict_older_than(self, max_age: timedelta, *, now: datetime | None = None) -> int:
        """
        Drop finished jobs whose last update is older than max_age.
        """

        cutoff = (now or datetime.now(timezone.utc)) - max_age
        with self._lock:
            expired = [
                job_id
                for job_id, job in self._jobs.items()
                if job.is_terminal and job.updated_at < cutoff
            ]
            for job_id in expired:
                del self._jobs[job_id]
        return len(expired)
