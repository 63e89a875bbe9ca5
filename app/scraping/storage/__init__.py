"""
Storage layer exports.
"""

from app.scraping.storage.base import DealStorage
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyDealStorage

__all__ = ["DealStorage", "SQLAlchemyDealStorage"]
