"""
Scraping pipeline exceptions.

Address-not-found and end-of-pagination are ordinary outcomes and have no
exception here.
"""

from __future__ import annotations


class ScrapingError(Exception):
    """Base exception for deal scraping failures."""


class SearchInputNotFoundError(ScrapingError):
    """Raised when the site's address search box cannot be located."""


class PersistenceError(ScrapingError):
    """Raised when a page of deals cannot be written for a non-conflict reason."""
