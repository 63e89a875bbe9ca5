"""
app/services package marker.
"""

from app.services.nadlan_scraping_service import (
    NadlanScrapingService,
    get_nadlan_scraping_service,
)
from app.services.scrape_job_service import (
    FastAPIBackgroundTaskExecutor,
    InlineTaskExecutor,
    ScrapeJobService,
)

__all__ = [
    "FastAPIBackgroundTaskExecutor",
    "InlineTaskExecutor",
    "NadlanScrapingService",
    "ScrapeJobService",
    "get_nadlan_scraping_service",
]
