"""
Storage layer interfaces for scraped deals and trend snapshots.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.domain.nadlan import Deal, ScrapeRequest, TrendSnapshot


class DealStorage(ABC):
    """
    Storage abstraction used by the extractor and the scrape engine.
    """

    @abstractmethod
    def insert_deals(self, deals: Sequence[Deal]) -> int:
        """
        Persist one page of deals and return the number of new rows.

        Deals already stored are skipped without error.
        """

    @abstractmethod
    def upsert_trend_snapshot(
        self,
        *,
        address_id: str,
        request: ScrapeRequest,
        snapshot: TrendSnapshot,
    ) -> bool:
        """
        Store the snapshot for an address, replacing any previous one.
        """
