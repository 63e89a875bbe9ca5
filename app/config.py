"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_MAX_PAGES = 50
DEFAULT_BASE_URL = "https://www.nadlan.gov.il"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class NadlanScrapingSettings:
    """
    Runtime settings for the browser-driven deals scraper.
    """

    base_url: str = DEFAULT_BASE_URL
    headless: bool = True
    locale: str = "he-IL"
    navigation_timeout_ms: int = 90_000
    rows_render_timeout_ms: int = 10_000
    next_page_timeout_ms: int = 15_000
    inter_page_delay_seconds: float = 0.6
    default_max_pages: int = DEFAULT_MAX_PAGES
    block_resources: bool = False
    storage_batch_size: int = 500

    @property
    def inter_page_delay_ms(self) -> int:
        return int(self.inter_page_delay_seconds * 1000)


@dataclass(frozen=True)
class JobSettings:
    """
    Retention policy for the in-memory job registry.
    """

    retention_seconds: int = 3600
    eviction_interval_seconds: int = 600


@lru_cache(maxsize=1)
def get_nadlan_scraping_settings() -> NadlanScrapingSettings:
    """
    Return cached scraper settings from environment variables.
    """

    return NadlanScrapingSettings(
        base_url=_get_str_env("NADLAN_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        headless=_get_bool_env("NADLAN_HEADLESS", True),
        locale=_get_str_env("NADLAN_LOCALE", "he-IL"),
        navigation_timeout_ms=max(1000, _get_int_env("NADLAN_NAVIGATION_TIMEOUT_MS", 90_000)),
        rows_render_timeout_ms=max(0, _get_int_env("NADLAN_ROWS_RENDER_TIMEOUT_MS", 10_000)),
        next_page_timeout_ms=max(1000, _get_int_env("NADLAN_NEXT_PAGE_TIMEOUT_MS", 15_000)),
        inter_page_delay_seconds=max(0.0, _get_float_env("NADLAN_INTER_PAGE_DELAY_SECONDS", 0.6)),
        default_max_pages=max(1, _get_int_env("NADLAN_DEFAULT_MAX_PAGES", DEFAULT_MAX_PAGES)),
        block_resources=_get_bool_env("NADLAN_BLOCK_RESOURCES", False),
        storage_batch_size=max(1, _get_int_env("NADLAN_STORAGE_BATCH_SIZE", 500)),
    )


@lru_cache(maxsize=1)
def get_job_settings() -> JobSettings:
    """
    Return cached job retention settings from environment variables.
    """

    return JobSettings(
        retention_seconds=max(60, _get_int_env("JOB_RETENTION_SECONDS", 3600)),
        eviction_interval_seconds=max(10, _get_int_env("JOB_EVICTION_INTERVAL_SECONDS", 600)),
    )
