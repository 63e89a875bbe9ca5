"""
SQLAlchemy-backed storage implementation for scraped deals.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.nadlan import Deal, ScrapeRequest, TrendSnapshot
from app.repositories.deal_repository import DealRepository
from app.repositories.trend_repository import AddressTrendRepository, trend_payload
from app.scraping.errors import PersistenceError
from app.scraping.logging_utils import log_event
from app.scraping.storage.base import DealStorage

logger = logging.getLogger(__name__)


class SQLAlchemyDealStorage(DealStorage):
    """
    Persist deals and trend snapshots through the repositories and DB session.
    """

    def __init__(self, *, session: Session, batch_size: int = 500) -> None:
        self._session = session
        self._batch_size = max(1, batch_size)

    def insert_deals(self, deals: Sequence[Deal]) -> int:
        if not deals:
            return 0

        repository = DealRepository(self._session)
        try:
            inserted = repository.bulk_insert(deals, batch_size=self._batch_size)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to store {len(deals)} deals: {exc}") from exc

        skipped = len(deals) - inserted
        if skipped:
            log_event(
                logger,
                logging.INFO,
                "deal_duplicates_skipped",
                skipped=skipped,
                inserted=inserted,
            )
        return inserted

    def upsert_trend_snapshot(
        self,
        *,
        address_id: str,
        request: ScrapeRequest,
        snapshot: TrendSnapshot,
    ) -> bool:
        payload = trend_payload(address_id=address_id, request=request, snapshot=snapshot)
        try:
            AddressTrendRepository(self._session).upsert(payload)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception("Failed to upsert trend snapshot address_id=%s", address_id)
            return False

        log_event(logger, logging.INFO, "trend_snapshot_saved", address_id=address_id)
        return True
