"""
app/domain/nadlan.py

Domain models for the address-driven deals scrape.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from app.config import DEFAULT_MAX_PAGES

RawRow = dict[str, Any]


@dataclass(frozen=True)
class ScrapeRequest:
    """
    One scrape submission: the address to resolve and a page cap.
    """

    city_name: str
    street: str
    house_number: str
    max_pages: int = DEFAULT_MAX_PAGES

    @property
    def display_address(self) -> str:
        return f"{self.city_name}, {self.street} {self.house_number}"


@dataclass(frozen=True)
class Deal:
    """
    Canonical deal record; every parsed field may be absent (None).
    """

    city_name: str | None
    serial_no: int | None
    address: str | None
    area_m2: float | None
    deal_date: str | None
    price_nis: float | None
    block_parcel_subparcel: str | None
    property_type: str | None
    rooms: float | None
    floor: str | None
    trend: str | None
    source_url: str | None
    raw: RawRow
    dedupe_key: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TrendSnapshot:
    """
    Market indicators read from an address page. Any field may be missing.
    """

    rental_yield_percent: float | None = None
    price_increase_percent: float | None = None
    prestige_score: int | None = None
    prestige_max: int | None = None
    median_prices_by_rooms: dict[str, float] | None = None
    quarter_prices: dict[str, Any] | None = None

    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class ScrapeOutcome:
    """
    Terminal payload of a scrape job.
    """

    success: bool
    deals_scraped: int
    message: str
    address_id: str | None = None
    deals: list[Deal] = field(default_factory=list)
    trend_snapshot: TrendSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "address_id": self.address_id,
            "deals_scraped": self.deals_scraped,
            "deals": [deal.to_dict() for deal in self.deals],
            "trend_snapshot": self.trend_snapshot.to_dict() if self.trend_snapshot else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """
    What one paginated extraction run produced.
    """

    deals: list[Deal]
    pages_visited: int
    trend_snapshot: TrendSnapshot | None = None

    @property
    def deals_scraped(self) -> int:
        return len(self.deals)
