"""
Scrape job endpoints: trigger, status polling and result retrieval.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_scrape_job_service, get_scrape_request
from app.domain.jobs import Job, JobStatus
from app.domain.nadlan import ScrapeRequest
from app.schemas.scrape import (
    JobErrorResponse,
    JobPendingResponse,
    JobResultResponse,
    JobStatusResponse,
    ScrapeAcceptedResponse,
    ScrapeOutcomePayload,
)
from app.services.scrape_job_service import FastAPIBackgroundTaskExecutor, ScrapeJobService

router = APIRouter(tags=["nadlan-scrape"])


def _require_job(service: ScrapeJobService, job_id: str) -> Job:
    job = service.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job


@router.post(
    "/scrape",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ScrapeAcceptedResponse,
)
def trigger_scrape(
    background_tasks: BackgroundTasks,
    scrape_request: ScrapeRequest = Depends(get_scrape_request),
    service: ScrapeJobService = Depends(get_scrape_job_service),
) -> ScrapeAcceptedResponse:
    job = service.trigger_scrape(
        executor=FastAPIBackgroundTaskExecutor(background_tasks),
        request=scrape_request,
    )
    return ScrapeAcceptedResponse(job_id=job.id)


@router.get("/status/{job_id}", response_model=JobStatusResponse)
def get_job_status(
    job_id: str,
    service: ScrapeJobService = Depends(get_scrape_job_service),
) -> JobStatusResponse:
    job = _require_job(service, job_id)
    return JobStatusResponse(
        job_id=job.id,
        status=job.status,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


@router.get(
    "/result/{job_id}",
    response_model=JobResultResponse,
    responses={
        status.HTTP_409_CONFLICT: {"model": JobPendingResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": JobErrorResponse},
    },
)
def get_job_result(
    job_id: str,
    service: ScrapeJobService = Depends(get_scrape_job_service),
) -> JobResultResponse | JSONResponse:
    job = _require_job(service, job_id)

    if job.status == JobStatus.ERROR:
        body = JobErrorResponse(
            job_id=job.id,
            status=job.status,
            error=job.error,
            updated_at=job.updated_at,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(mode="json", by_alias=True),
        )

    if job.status != JobStatus.DONE or job.result is None:
        body = JobPendingResponse(
            job_id=job.id,
            status=job.status,
            message="Job is not finished yet.",
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=body.model_dump(mode="json", by_alias=True),
        )

    return JobResultResponse(
        job_id=job.id,
        status=job.status,
        result=ScrapeOutcomePayload.from_outcome(job.result),
        updated_at=job.updated_at,
    )
