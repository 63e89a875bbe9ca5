"""
Schemas for the scrape trigger, status and result endpoints.

Wire names are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.nadlan import Deal, ScrapeOutcome


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScrapeRequestBody(CamelModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    city_name: str | None = None
    street: str | None = None
    house_number: str | None = None
    max_pages: int | None = Field(default=None, gt=0, strict=True)


class ScrapeAcceptedResponse(CamelModel):
    job_id: str
    status: str = "processing"


class JobStatusResponse(CamelModel):
    job_id: str
    status: str
    created_at: datetime
    updated_at: datetime


class DealPayload(CamelModel):
    city_name: str | None = None
    serial_no: int | None = None
    address: str | None = None
    area_m2: float | None = None
    deal_date: str | None = None
    price_nis: float | None = None
    block_parcel_subparcel: str | None = None
    property_type: str | None = None
    rooms: float | None = None
    floor: str | None = None
    trend: str | None = None
    source_url: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_deal(cls, deal: Deal) -> DealPayload:
        values = deal.to_dict()
        values.pop("dedupe_key", None)
        return cls(**values)


class ScrapeOutcomePayload(CamelModel):
    success: bool
    address_id: str | None = None
    deals_scraped: int
    deals: list[DealPayload] = Field(default_factory=list)
    trend_snapshot: dict[str, Any] | None = None
    message: str

    @classmethod
    def from_outcome(cls, outcome: ScrapeOutcome) -> ScrapeOutcomePayload:
        snapshot = outcome.trend_snapshot
        return cls(
            success=outcome.success,
            address_id=outcome.address_id,
            deals_scraped=outcome.deals_scraped,
            deals=[DealPayload.from_deal(deal) for deal in outcome.deals],
            trend_snapshot=snapshot.to_dict() if snapshot and not snapshot.is_empty() else None,
            message=outcome.message,
        )


class JobResultResponse(CamelModel):
    job_id: str
    status: str
    result: ScrapeOutcomePayload
    updated_at: datetime


class JobPendingResponse(CamelModel):
    job_id: str
    status: str
    message: str


class JobErrorResponse(CamelModel):
    job_id: str
    status: str
    error: str | None = None
    updated_at: datetime


class HealthResponse(BaseModel):
    status: str
    jobs: int
