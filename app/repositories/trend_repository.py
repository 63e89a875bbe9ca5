"""
app/repositories/trend_repository.py

Upsert of per-address market trend snapshots.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.nadlan import ScrapeRequest, TrendSnapshot
from db.models.address_price_trend import AddressPriceTrend

_UPDATABLE_COLUMNS = (
    "city_name",
    "street_name",
    "house_number",
    "address",
    "rental_yield_percent",
    "price_increase_percent",
    "prestige_score",
    "prestige_max",
    "median_prices_by_rooms",
    "quarter_prices",
    "raw_trends_data",
    "scraped_at",
)


def trend_payload(
    *,
    address_id: str,
    request: ScrapeRequest,
    snapshot: TrendSnapshot,
    scraped_at: datetime | None = None,
) -> dict[str, Any]:
    return {
        "address_id": address_id,
        "city_name": request.city_name,
        "street_name": request.street,
        "house_number": request.house_number,
        "address": request.display_address,
        "rental_yield_percent": snapshot.rental_yield_percent,
        "price_increase_percent": snapshot.price_increase_percent,
        "prestige_score": snapshot.prestige_score,
        "prestige_max": snapshot.prestige_max,
        "median_prices_by_rooms": snapshot.median_prices_by_rooms,
        "quarter_prices": snapshot.quarter_prices,
        "raw_trends_data": snapshot.to_dict(),
        "scraped_at": scraped_at or datetime.now(timezone.utc),
    }


class AddressTrendRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, payload: dict[str, Any]) -> None:
        """
        Insert the snapshot or overwrite the existing row for the same address.
        """

        stmt = insert(AddressPriceTrend).values(**payload)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AddressPriceTrend.address_id],
            set_={
                **{column: stmt.excluded[column] for column in _UPDATABLE_COLUMNS},
                "updated_at": func.now(),
            },
        )
        self._session.execute(stmt)
