"""
db/models/address_price_trend.py

One market trend snapshot per resolved address (last write wins).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class AddressPriceTrend(Base, TimestampMixin):
    __tablename__ = "address_price_trends"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    address_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="External address identifier taken from the detail page URL",
    )
    city_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    street_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    house_number: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    rental_yield_percent: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_increase_percent: Mapped[float | None] = mapped_column(Float, nullable=True)
    prestige_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prestige_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    median_prices_by_rooms: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    quarter_prices: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    raw_trends_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    scraped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("address_id", name="uq_address_price_trends_address_id"),
    )
