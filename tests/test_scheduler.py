from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from app.config import JobSettings
from app.domain.jobs import JobStatus
from app.domain.nadlan import ScrapeOutcome
from app.jobs.registry import JobRegistry
from app.scheduler.jobs import build_scheduler, evict_finished_jobs


def _age(registry: JobRegistry, job_id: str, seconds: int) -> None:
    job = registry.get(job_id)
    assert job is not None
    registry._jobs[job_id] = replace(  # noqa: SLF001
        job, updated_at=datetime.now(timezone.utc) - timedelta(seconds=seconds)
    )


def test_evicts_only_stale_finished_jobs() -> None:
    registry = JobRegistry()
    stale_done = registry.create()
    registry.mark_running(stale_done.id)
    registry.mark_done(stale_done.id, ScrapeOutcome(success=True, deals_scraped=0, message="ok"))
    done = registry.get(stale_done.id)
    assert done is not None and done.status == JobStatus.DONE
    _age(registry, stale_done.id, 7200)

    stale_running = registry.create()
    registry.mark_running(stale_running.id)
    _age(registry, stale_running.id, 7200)

    fresh_failed = registry.create()
    registry.mark_failed(fresh_failed.id, "boom")

    assert evict_finished_jobs(registry, 3600) == 1
    assert registry.get(stale_done.id) is None
    assert registry.get(stale_running.id) is not None
    assert registry.get(fresh_failed.id) is not None


def test_nothing_to_evict() -> None:
    registry = JobRegistry()
    registry.create()

    assert evict_finished_jobs(registry, 60) == 0
    assert len(registry) == 1


def test_build_scheduler_registers_eviction_job() -> None:
    registry = JobRegistry()
    scheduler = build_scheduler(registry, JobSettings(retention_seconds=120, eviction_interval_seconds=30))

    job = scheduler.get_job("evict_finished_jobs")

    assert job is not None
    assert job.func is evict_finished_jobs
    assert job.args == (registry, 120)
    assert job.trigger.interval == timedelta(seconds=30)
    assert not scheduler.running
