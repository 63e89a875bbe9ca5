"""
Resolve a (city, street, house number) triple into the site's address id.

The site has no lookup API: the resolver types into the search box, picks a
matching autocomplete suggestion (or submits the query directly) and reads
the id from the URL of the page it lands on.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from playwright.sync_api import ElementHandle, Page
from playwright.sync_api import Error as PlaywrightError

from app.config import NadlanScrapingSettings
from app.scraping.browser import BrowserSessionFactory, browser_session
from app.scraping.errors import SearchInputNotFoundError
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

SEARCH_OPENERS: tuple[str, ...] = (
    'button[aria-label*="חיפוש"]',
    'button:has-text("חיפוש")',
    "header button:has(svg)",
    ".search, .Search, .header .search button",
    'button[type="button"]',
    '[role="button"]',
)
SEARCH_INPUT_SELECTOR = (
    'input[type="search"], input[placeholder*="חיפוש"], input[aria-label*="חיפוש"], '
    'input[dir="rtl"], input[type="text"]'
)
SUGGESTION_SELECTORS: tuple[str, ...] = (
    "li",
    ".suggestion",
    '[role="option"]',
    "ul li",
    '[class*="suggestion"]',
    '[class*="option"]',
)
SUGGESTION_WAIT_SELECTOR = ", ".join(SUGGESTION_SELECTORS)
FALLBACK_SUGGESTION_SELECTOR = 'li, .suggestion, [role="option"], ul li'

ADDRESS_ID_PATTERN = re.compile(r"[?&]id=(\d+)")
_MIN_SUGGESTION_LENGTH = 3


def build_search_queries(*, city_name: str, street: str, house_number: str) -> list[str]:
    return [
        f"{street} {house_number} {city_name}",
        f"{city_name} {street} {house_number}",
        f"{street} {house_number}",
    ]


def filter_suggestions(
    texts: Iterable[str],
    *,
    street: str,
    house_number: str,
    city_name: str | None,
) -> list[str]:
    """
    Keep unique suggestion texts mentioning the street, house number and city.

    Document order is preserved; the first survivor is the one to click.
    """

    street_lower = street.lower()
    city_lower = city_name.lower() if city_name else None
    seen: set[str] = set()
    matches: list[str] = []
    for raw_text in texts:
        text = (raw_text or "").strip()
        if len(text) < _MIN_SUGGESTION_LENGTH or text in seen:
            continue
        seen.add(text)
        lowered = text.lower()
        if street_lower not in lowered or house_number not in text:
            continue
        if city_lower and city_lower not in lowered:
            continue
        matches.append(text)
    return matches


def extract_address_id(url: str) -> str | None:
    match = ADDRESS_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def _is_address_view(url: str) -> bool:
    return "view=address" in url or "view=settlement" in url


def _required(name: str, value: str) -> str:
    stripped = (value or "").strip()
    if not stripped:
        raise ValueError(f"{name} is required.")
    return stripped


class AddressResolver:
    """
    Drives the site's search surface to find a stable address id.
    """

    def __init__(
        self,
        *,
        settings: NadlanScrapingSettings,
        session_factory: BrowserSessionFactory = browser_session,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory

    def resolve(self, *, city_name: str, street: str, house_number: str) -> str | None:
        """
        Return the address id, or None when no query variant leads to one.
        """

        city_name = _required("city_name", city_name)
        street = _required("street", street)
        house_number = _required("house_number", house_number)

        with self._session_factory(self._settings) as page:
            page.goto(
                f"{self._settings.base_url}/",
                wait_until="domcontentloaded",
                timeout=self._settings.navigation_timeout_ms,
            )
            page.wait_for_timeout(2000)
            search_input = self._locate_search_input(page)

            queries = build_search_queries(
                city_name=city_name,
                street=street,
                house_number=house_number,
            )
            for query in queries:
                address_id = self._try_query(
                    page,
                    search_input,
                    query=query,
                    street=street,
                    house_number=house_number,
                    city_name=city_name,
                )
                if address_id:
                    log_event(
                        logger,
                        logging.INFO,
                        "address_resolved",
                        query=query,
                        address_id=address_id,
                    )
                    return address_id

        log_event(
            logger,
            logging.WARNING,
            "address_not_resolved",
            city_name=city_name,
            street=street,
            house_number=house_number,
            queries_tried=len(queries),
        )
        return None

    def _try_query(
        self,
        page: Page,
        search_input: ElementHandle,
        *,
        query: str,
        street: str,
        house_number: str,
        city_name: str,
    ) -> str | None:
        search_input.fill(query)
        page.wait_for_timeout(800)
        try:
            page.wait_for_selector(SUGGESTION_WAIT_SELECTOR, timeout=3000)
        except PlaywrightError:
            logger.debug("No suggestions rendered for query=%r", query)

        candidates = filter_suggestions(
            self._suggestion_texts(page),
            street=street,
            house_number=house_number,
            city_name=city_name,
        )
        log_event(logger, logging.INFO, "address_search", query=query, candidates=len(candidates))

        if candidates:
            self._click_suggestion(page, candidates[0])
            try:
                page.wait_for_url(_is_address_view, timeout=15000)
            except PlaywrightError:
                logger.debug("Suggestion click did not reach an address view query=%r", query)
            page.wait_for_timeout(1000)
        else:
            search_input.press("Enter")
            page.wait_for_timeout(3000)

        return extract_address_id(page.url)

    @staticmethod
    def _suggestion_texts(page: Page) -> list[str]:
        texts: list[str] = []
        for selector in SUGGESTION_SELECTORS:
            texts.extend(page.locator(selector).all_text_contents())
        return texts

    @staticmethod
    def _click_suggestion(page: Page, text: str) -> None:
        escaped = text.replace('"', '\\"')
        try:
            suggestion = page.locator(f'text="{escaped}"').first
            suggestion.wait_for(timeout=2000)
            suggestion.click(timeout=2000)
            return
        except PlaywrightError:
            logger.debug("Exact suggestion click failed, falling back to first option")

        try:
            page.locator(FALLBACK_SUGGESTION_SELECTOR).first.click(timeout=2000)
        except PlaywrightError as exc:
            logger.warning("Unable to click any suggestion: %s", exc)

    def _locate_search_input(self, page: Page) -> ElementHandle:
        search_input = self._open_search(page)
        if search_input is None:
            page.mouse.wheel(0, 600)
            page.wait_for_timeout(800)
            search_input = self._open_search(page)
        if search_input is None:
            for _ in range(2):
                page.keyboard.press("Escape")
                page.wait_for_timeout(500)
            search_input = self._open_search(page)
        if search_input is None:
            page.wait_for_timeout(1000)
            search_input = self._query(page, "input")
        if search_input is None:
            raise SearchInputNotFoundError("Search input not found on the site.")
        return search_input

    def _open_search(self, page: Page) -> ElementHandle | None:
        for opener in SEARCH_OPENERS:
            button = self._query(page, opener)
            if button is not None:
                try:
                    button.click(timeout=2000)
                    page.wait_for_timeout(500)
                except PlaywrightError:
                    logger.debug("Search opener not clickable selector=%s", opener)
            search_input = self._visible_input(page)
            if search_input is not None:
                return search_input
        return self._visible_input(page)

    def _visible_input(self, page: Page) -> ElementHandle | None:
        candidate = self._query(page, SEARCH_INPUT_SELECTOR)
        if candidate is None:
            return None
        try:
            return candidate if candidate.is_visible() else None
        except PlaywrightError:
            return None

    @staticmethod
    def _query(page: Page, selector: str) -> ElementHandle | None:
        try:
            return page.query_selector(selector)
        except PlaywrightError:
            return None
