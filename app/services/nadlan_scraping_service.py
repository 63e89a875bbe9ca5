"""
app/services/nadlan_scraping_service.py

Service orchestration for the nadlan.gov.il deals scrape.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import get_nadlan_scraping_settings
from app.domain.nadlan import ScrapeOutcome, ScrapeRequest
from app.scraping.engine import NadlanScrapingEngine
from app.scraping.storage import SQLAlchemyDealStorage


class NadlanScrapingService:
    """
    Runs one scrape with its own DB session and returns the outcome.
    """

    def __init__(self, *, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory
        self._settings = get_nadlan_scraping_settings()

    def scrape(self, request: ScrapeRequest) -> ScrapeOutcome:
        with self._session_factory() as db:
            storage = SQLAlchemyDealStorage(
                session=db,
                batch_size=self._settings.storage_batch_size,
            )
            engine = NadlanScrapingEngine(settings=self._settings, storage=storage)
            return engine.run(request)


@lru_cache(maxsize=1)
def get_nadlan_scraping_service() -> NadlanScrapingService:
    """
    Build and cache the nadlan scraping service.
    """

    return NadlanScrapingService()
