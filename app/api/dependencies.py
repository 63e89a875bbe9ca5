"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and job services.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from pydantic import ValidationError

from app.config import get_nadlan_scraping_settings
from app.domain.nadlan import ScrapeRequest
from app.jobs.registry import JobRegistry
from app.schemas.scrape import ScrapeRequestBody
from app.services.nadlan_scraping_service import get_nadlan_scraping_service
from app.services.scrape_job_service import ScrapeJobService, ScrapeRunner

REQUIRED_FIELDS_MESSAGE = "cityName, street and houseNumber are required."


def get_job_registry(request: Request) -> JobRegistry:
    """
    Return the registry created in the application lifespan.
    """

    return request.app.state.job_registry


def get_scrape_job_service(
    registry: JobRegistry = Depends(get_job_registry),
    scraping_service: ScrapeRunner = Depends(get_nadlan_scraping_service),
) -> ScrapeJobService:
    return ScrapeJobService(registry=registry, scraping_service=scraping_service)


async def _read_json_body(request: Request) -> Any:
    """
    Decode the raw request body; an empty body reads as None.
    """

    raw_body = await request.body()
    if not raw_body.strip():
        return None
    try:
        return json.loads(raw_body)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body is not valid JSON.",
        ) from exc


def get_scrape_request(payload: Any = Depends(_read_json_body)) -> ScrapeRequest:
    """
    Validate a scrape submission; every failure is a 400.
    """

    if payload is not None and not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be a JSON object.",
        )

    try:
        body = ScrapeRequestBody.model_validate(payload or {})
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid fields: {', '.join(fields)}.",
        ) from exc

    city_name = (body.city_name or "").strip()
    street = (body.street or "").strip()
    house_number = (body.house_number or "").strip()
    if not city_name or not street or not house_number:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=REQUIRED_FIELDS_MESSAGE,
        )

    max_pages = body.max_pages
    if max_pages is None:
        max_pages = get_nadlan_scraping_settings().default_max_pages
    return ScrapeRequest(
        city_name=city_name,
        street=street,
        house_number=house_number,
        max_pages=max_pages,
    )
