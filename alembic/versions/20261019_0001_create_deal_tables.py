"""create deals and address_price_trends tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "deals",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("dedupe_key", sa.String(length=64), nullable=False),
        sa.Column("city_name", sa.Text(), nullable=True),
        sa.Column("serial_no", sa.Integer(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("area_m2", sa.Float(), nullable=True),
        sa.Column("deal_date", sa.Date(), nullable=True),
        sa.Column("price_nis", sa.Float(), nullable=True),
        sa.Column("block_parcel_subparcel", sa.Text(), nullable=True),
        sa.Column("property_type", sa.Text(), nullable=True),
        sa.Column("rooms", sa.Float(), nullable=True),
        sa.Column("floor", sa.Text(), nullable=True),
        sa.Column("trend", sa.Text(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("raw", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("dedupe_key", name="uq_deals_dedupe_key"),
    )
    op.create_index("ix_deals_city_name", "deals", ["city_name"], unique=False)
    op.create_index("ix_deals_address", "deals", ["address"], unique=False)
    op.create_index("ix_deals_deal_date", "deals", ["deal_date"], unique=False)

    op.create_table(
        "address_price_trends",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("address_id", sa.String(length=32), nullable=False),
        sa.Column("city_name", sa.Text(), nullable=True),
        sa.Column("street_name", sa.Text(), nullable=True),
        sa.Column("house_number", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("rental_yield_percent", sa.Float(), nullable=True),
        sa.Column("price_increase_percent", sa.Float(), nullable=True),
        sa.Column("prestige_score", sa.Integer(), nullable=True),
        sa.Column("prestige_max", sa.Integer(), nullable=True),
        sa.Column("median_prices_by_rooms", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("quarter_prices", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("raw_trends_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("scraped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("address_id", name="uq_address_price_trends_address_id"),
    )


def downgrade() -> None:
    op.drop_table("address_price_trends")
    op.drop_index("ix_deals_deal_date", table_name="deals")
    op.drop_index("ix_deals_address", table_name="deals")
    op.drop_index("ix_deals_city_name", table_name="deals")
    op.drop_table("deals")
