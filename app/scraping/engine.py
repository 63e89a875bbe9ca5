"""
Nadlan deals scraping engine.
"""

from __future__ import annotations

import logging

from app.config import NadlanScrapingSettings
from app.domain.nadlan import ScrapeOutcome, ScrapeRequest
from app.scraping.extractor import DealPageExtractor
from app.scraping.logging_utils import log_event
from app.scraping.resolver import AddressResolver
from app.scraping.storage import DealStorage

logger = logging.getLogger(__name__)


class NadlanScrapingEngine:
    """
    Resolve the address, walk its deals pages and persist the trend snapshot.

    Exceptions are not caught here; the job service owns the error boundary.
    """

    def __init__(
        self,
        *,
        settings: NadlanScrapingSettings,
        storage: DealStorage,
        resolver: AddressResolver | None = None,
        extractor: DealPageExtractor | None = None,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._resolver = resolver or AddressResolver(settings=settings)
        self._extractor = extractor or DealPageExtractor(settings=settings, storage=storage)

    def run(self, request: ScrapeRequest) -> ScrapeOutcome:
        address_id = self._resolver.resolve(
            city_name=request.city_name,
            street=request.street,
            house_number=request.house_number,
        )
        if not address_id:
            return ScrapeOutcome(
                success=False,
                deals_scraped=0,
                message=f"Address id not found for: {request.display_address}",
            )

        result = self._extractor.run(request=request, address_id=address_id)

        snapshot = result.trend_snapshot
        if snapshot is not None and snapshot.is_empty():
            snapshot = None
        if snapshot is not None:
            self._storage.upsert_trend_snapshot(
                address_id=address_id,
                request=request,
                snapshot=snapshot,
            )

        log_event(
            logger,
            logging.INFO,
            "nadlan_scrape_completed",
            address_id=address_id,
            deals_scraped=result.deals_scraped,
            pages_visited=result.pages_visited,
            has_trends=snapshot is not None,
        )
        return ScrapeOutcome(
            success=True,
            deals_scraped=result.deals_scraped,
            message=f"Inserted a total of {result.deals_scraped} deals",
            address_id=address_id,
            deals=result.deals,
            trend_snapshot=snapshot,
        )
