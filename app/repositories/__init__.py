"""
app/repositories package marker.
"""

from app.repositories.deal_repository import DealRepository
from app.repositories.trend_repository import AddressTrendRepository

__all__ = [
    "AddressTrendRepository",
    "DealRepository",
]
