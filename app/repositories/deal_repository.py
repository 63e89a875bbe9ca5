"""
app/repositories/deal_repository.py

Persistence layer for scraped deals.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.nadlan import Deal
from db.models.deal import DEAL_DEDUPE_CONSTRAINT, DealRecord

_DEFAULT_BATCH_SIZE = 500


def _to_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def deal_payload(deal: Deal) -> dict[str, Any]:
    return {
        "dedupe_key": deal.dedupe_key,
        "city_name": deal.city_name,
        "serial_no": deal.serial_no,
        "address": deal.address,
        "area_m2": deal.area_m2,
        "deal_date": _to_date(deal.deal_date),
        "price_nis": deal.price_nis,
        "block_parcel_subparcel": deal.block_parcel_subparcel,
        "property_type": deal.property_type,
        "rooms": deal.rooms,
        "floor": deal.floor,
        "trend": deal.trend,
        "source_url": deal.source_url,
        "raw": deal.raw,
    }


class DealRepository:
    """
    Repository for batch persistence of deals keyed by dedupe_key.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def bulk_insert(
        self,
        deals: Sequence[Deal],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert deals with PostgreSQL bulk INSERT, skipping existing dedupe keys.

        Returns the number of rows actually written.
        """

        if not deals:
            return 0

        size = max(1, batch_size)
        payloads = self._deduplicate_payloads([deal_payload(deal) for deal in deals])
        inserted = 0

        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = (
                insert(DealRecord)
                .values(chunk)
                .on_conflict_do_nothing(constraint=DEAL_DEDUPE_CONSTRAINT)
                .returning(DealRecord.id)
            )
            inserted += len(self._session.scalars(stmt).all())

        return inserted

    @staticmethod
    def _deduplicate_payloads(payloads: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        seen: set[str] = set()
        deduped: list[dict[str, Any]] = []
        for payload in payloads:
            key = payload["dedupe_key"]
            if key in seen:
                continue
            seen.add(key)
            deduped.append(payload)
        return deduped
