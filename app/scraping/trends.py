"""
Market trend snapshot read from the text of an address page.

Each rule looks for one indicator and returns the fields it found, or None.
Rules are independent; their results are merged into a single TrendSnapshot.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from bs4 import BeautifulSoup
from playwright.sync_api import Page

from app.domain.nadlan import TrendSnapshot
from app.scraping.logging_utils import log_event
from app.scraping.normalization.values import parse_number

logger = logging.getLogger(__name__)

_PRICE_SUFFIX = r"\s*מ'?\s*₪"

RENTAL_YIELD_PATTERN = re.compile(r"([\d.]+)\s*%\s*תשואה")
PRICE_INCREASE_PATTERN = re.compile(r"עליית\s+מחירים\s+(-?[\d.]+)\s*%")
PRICE_DECREASE_PATTERN = re.compile(r"ירידת\s+מחירים\s+([\d.]+)\s*%")
PRESTIGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"ציון\s+יוקר[^\d]*(\d+)\s*/\s*(\d+)"),
    re.compile(r"יוקר[^\d]*(\d+)\s*/\s*(\d+)"),
    re.compile(r"(\d+)\s*/\s*(\d+)[^\d]*ציון\s+יוקר"),
    re.compile(r"(\d+)\s*/\s*(\d+)[^\d]*יוקר"),
)
SCORE_PATTERN = re.compile(r"(\d+)\s*/\s*(\d+)")
PRESTIGE_CARD_SELECTOR = '[class*="card"], [class*="Card"], div, section'
ROOM_PRICE_PATTERN = re.compile(r"(\d+)\s*חדרים[:\s]*([\d.]+)" + _PRICE_SUFFIX)
WEIGHTED_PRICE_PATTERN = re.compile(r"משוקלל[^\d]*([\d.]+)" + _PRICE_SUFFIX)
NEIGHBORHOOD_PRICE_PATTERN = re.compile(
    r"מחיר\s+חציוני\s+(?:בשכונת|בשכונה|ב)?([^:\n]+?):\s*([\d.]+)" + _PRICE_SUFFIX
)
NATIONAL_PRICE_PATTERN = re.compile(r"מחיר\s+ארצי[^\d]*([\d.]+)" + _PRICE_SUFFIX)


@dataclass(frozen=True)
class TrendPageContent:
    text: str
    html: str | None = None
    city_name: str | None = None


TrendRule = Callable[[TrendPageContent], "dict[str, Any] | None"]


def _signed_number(text: str) -> float | None:
    value = parse_number(text)
    if value is None:
        return None
    return -value if text.strip().startswith("-") else value


def rental_yield_rule(content: TrendPageContent) -> dict[str, Any] | None:
    match = RENTAL_YIELD_PATTERN.search(content.text)
    value = parse_number(match.group(1)) if match else None
    return {"rental_yield_percent": value} if value is not None else None


def price_change_rule(content: TrendPageContent) -> dict[str, Any] | None:
    value: float | None = None
    match = PRICE_INCREASE_PATTERN.search(content.text)
    if match:
        value = _signed_number(match.group(1))
    else:
        decrease = PRICE_DECREASE_PATTERN.search(content.text)
        if decrease:
            value = _signed_number(f"-{decrease.group(1)}")
    return {"price_increase_percent": value} if value is not None else None


def _score_fields(match: re.Match[str]) -> dict[str, Any]:
    return {"prestige_score": int(match.group(1)), "prestige_max": int(match.group(2))}


def prestige_rule(content: TrendPageContent) -> dict[str, Any] | None:
    for pattern in PRESTIGE_PATTERNS:
        match = pattern.search(content.text)
        if match:
            return _score_fields(match)

    if not content.html:
        return None
    soup = BeautifulSoup(content.html, "html.parser")
    for card in soup.select(PRESTIGE_CARD_SELECTOR):
        card_text = card.get_text(" ", strip=True)
        if "יוקר" not in card_text and "ציון" not in card_text:
            continue
        match = SCORE_PATTERN.search(card_text)
        if match:
            return _score_fields(match)
    return None


def median_prices_rule(content: TrendPageContent) -> dict[str, Any] | None:
    medians: dict[str, float] = {}
    for rooms, price in ROOM_PRICE_PATTERN.findall(content.text):
        value = parse_number(price)
        if value is not None:
            medians[f"{rooms}_rooms"] = value

    weighted = WEIGHTED_PRICE_PATTERN.search(content.text)
    if weighted:
        value = parse_number(weighted.group(1))
        if value is not None:
            medians["weighted_all"] = value

    return {"median_prices_by_rooms": medians} if medians else None


def _city_price_pattern(city_name: str) -> re.Pattern[str]:
    words = [re.escape(word) for word in city_name.split()]
    return re.compile(r"\s+".join(words) + r"[^\d]*([\d.]+)" + _PRICE_SUFFIX)


def quarter_prices_rule(content: TrendPageContent) -> dict[str, Any] | None:
    quarter: dict[str, Any] = {}

    neighborhood = NEIGHBORHOOD_PRICE_PATTERN.search(content.text)
    if neighborhood:
        value = parse_number(neighborhood.group(2))
        if value is not None:
            quarter["neighborhood_name"] = neighborhood.group(1).strip()
            quarter["neighborhood"] = value

    if content.city_name and content.city_name.strip():
        city = _city_price_pattern(content.city_name.strip()).search(content.text)
        value = parse_number(city.group(1)) if city else None
        if value is not None:
            quarter["city"] = value

    national = NATIONAL_PRICE_PATTERN.search(content.text)
    value = parse_number(national.group(1)) if national else None
    if value is not None:
        quarter["national"] = value

    return {"quarter_prices": quarter} if quarter else None


DEFAULT_RULES: tuple[TrendRule, ...] = (
    rental_yield_rule,
    price_change_rule,
    prestige_rule,
    median_prices_rule,
    quarter_prices_rule,
)


class TrendSnapshotExtractor:
    """
    Applies the trend rules in order and merges their findings.
    """

    def __init__(self, rules: tuple[TrendRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def extract(
        self,
        *,
        text: str,
        html: str | None = None,
        city_name: str | None = None,
    ) -> TrendSnapshot | None:
        """
        Return the snapshot, or None when no rule found anything.
        """

        content = TrendPageContent(text=text or "", html=html, city_name=city_name)
        snapshot = TrendSnapshot()
        for rule in self._rules:
            fields = rule(content)
            if not fields:
                continue
            for name, value in fields.items():
                setattr(snapshot, name, value)

        if snapshot.is_empty():
            log_event(logger, logging.INFO, "trend_snapshot_empty", city_name=city_name)
            return None
        log_event(logger, logging.INFO, "trend_snapshot_extracted", fields=sorted(snapshot.to_dict()))
        return snapshot

    def extract_from_page(self, page: Page, *, city_name: str | None = None) -> TrendSnapshot | None:
        return self.extract(text=page.inner_text("body"), html=page.content(), city_name=city_name)
