"""
Model package exports.

Import every SQLAlchemy model here so metadata registration and Alembic
autogeneration see the full schema.
"""

from db.models.address_price_trend import AddressPriceTrend
from db.models.deal import DEAL_DEDUPE_CONSTRAINT, DealRecord

__all__ = [
    "AddressPriceTrend",
    "DEAL_DEDUPE_CONSTRAINT",
    "DealRecord",
]
