"""
db/models/deal.py

Normalized real-estate transaction scraped from the deals table of an address page.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from sqlalchemy import Date, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin

DEAL_DEDUPE_CONSTRAINT = "uq_deals_dedupe_key"


class DealRecord(Base, CreatedAtMixin):
    __tablename__ = "deals"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    dedupe_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 over the identifying deal fields",
    )
    city_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    serial_no: Mapped[int | None] = mapped_column(Integer, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    area_m2: Mapped[float | None] = mapped_column(Float, nullable=True)
    deal_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    price_nis: Mapped[float | None] = mapped_column(Float, nullable=True)
    block_parcel_subparcel: Mapped[str | None] = mapped_column(Text, nullable=True)
    property_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    rooms: Mapped[float | None] = mapped_column(Float, nullable=True)
    floor: Mapped[str | None] = mapped_column(Text, nullable=True)
    trend: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Original source row, kept verbatim",
    )
    __table_args__ = (
        UniqueConstraint("dedupe_key", name=DEAL_DEDUPE_CONSTRAINT),
        Index("ix_deals_city_name", "city_name"),
        Index("ix_deals_address", "address"),
        Index("ix_deals_deal_date", "deal_date"),
    )
