"""
API schema exports.
"""

from app.schemas.scrape import (
    DealPayload,
    HealthResponse,
    JobErrorResponse,
    JobPendingResponse,
    JobResultResponse,
    JobStatusResponse,
    ScrapeAcceptedResponse,
    ScrapeOutcomePayload,
    ScrapeRequestBody,
)

__all__ = [
    "DealPayload",
    "HealthResponse",
    "JobErrorResponse",
    "JobPendingResponse",
    "JobResultResponse",
    "JobStatusResponse",
    "ScrapeAcceptedResponse",
    "ScrapeOutcomePayload",
    "ScrapeRequestBody",
]
