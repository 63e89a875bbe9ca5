"""
app/domain/jobs.py

Asynchronous scrape job state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.nadlan import ScrapeOutcome


class JobStatus:
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    TERMINAL = frozenset({DONE, ERROR})


# A job can fail before it ever starts (scheduling failure), never the reverse.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING, JobStatus.ERROR}),
    JobStatus.RUNNING: frozenset({JobStatus.DONE, JobStatus.ERROR}),
    JobStatus.DONE: frozenset(),
    JobStatus.ERROR: frozenset(),
}


@dataclass(frozen=True)
class Job:
    """
    Immutable snapshot of one job as held by the registry.
    """

    id: str
    status: str
    created_at: datetime
    updated_at: datetime
    result: ScrapeOutcome | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in JobStatus.TERMINAL
