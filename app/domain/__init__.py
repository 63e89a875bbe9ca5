"""
app/domain package marker.
"""

from app.domain.jobs import ALLOWED_TRANSITIONS, Job, JobStatus
from app.domain.nadlan import (
    Deal,
    ExtractionResult,
    RawRow,
    ScrapeOutcome,
    ScrapeRequest,
    TrendSnapshot,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "Deal",
    "ExtractionResult",
    "Job",
    "JobStatus",
    "RawRow",
    "ScrapeOutcome",
    "ScrapeRequest",
    "TrendSnapshot",
]
