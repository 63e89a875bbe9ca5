"""
Normalization layer exports.
"""

from app.scraping.normalization.deal_normalizer import DealNormalizer
from app.scraping.normalization.values import clean_text, parse_date, parse_int, parse_number

__all__ = ["DealNormalizer", "clean_text", "parse_date", "parse_int", "parse_number"]
