"""
Paginated deal extraction from an address detail page.

Each page is read through the prioritized row sources, normalized into Deals
and handed to storage before the next page is requested, so a failure deep
into pagination keeps everything already written.
"""

from __future__ import annotations

import logging
import time

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from app.config import NadlanScrapingSettings
from app.domain.nadlan import Deal, ExtractionResult, ScrapeRequest, TrendSnapshot
from app.scraping.browser import BrowserSessionFactory, browser_session
from app.scraping.logging_utils import log_event
from app.scraping.normalization.deal_normalizer import DealNormalizer
from app.scraping.row_sources import ApiResponseRowSource, BestTableRowSource, PrioritizedRowSource
from app.scraping.storage.base import DealStorage
from app.scraping.trends import TrendSnapshotExtractor

logger = logging.getLogger(__name__)

ROWS_READY_SELECTOR = "table tbody tr"
NEXT_PAGE_SELECTORS: tuple[str, ...] = (
    'a:has-text("הבא")',
    'button:has-text("הבא")',
    "text=הבא",
)
FIRST_ROW_KEY_SCRIPT = """() => {
  const tr = document.querySelector('table tbody tr');
  return tr ? (tr.textContent || '').trim().slice(0, 120) : '';
}"""

_SCROLL_PASSES = 6
_SCROLL_DELTA_Y = 1200
_CLICK_ATTEMPTS = 2
_PAGE_CHANGE_POLL_MS = 250


def build_deals_url(base_url: str, address_id: str) -> str:
    return f"{base_url}/?view=address&id={address_id}&page=deals"


class DealPageExtractor:
    """
    Walks the deals table of one address page by page.
    """

    def __init__(
        self,
        *,
        settings: NadlanScrapingSettings,
        storage: DealStorage,
        normalizer: DealNormalizer | None = None,
        trend_extractor: TrendSnapshotExtractor | None = None,
        session_factory: BrowserSessionFactory = browser_session,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._normalizer = normalizer or DealNormalizer()
        self._trend_extractor = trend_extractor or TrendSnapshotExtractor()
        self._session_factory = session_factory

    def run(self, *, request: ScrapeRequest, address_id: str) -> ExtractionResult:
        url = build_deals_url(self._settings.base_url, address_id)
        api_source = ApiResponseRowSource()
        row_source = PrioritizedRowSource([api_source, BestTableRowSource()])

        deals: list[Deal] = []
        pages_visited = 0
        with self._session_factory(self._settings) as page:
            api_source.attach(page)
            self._open_deals_page(page, url)
            trend_snapshot = self._read_trends(page, request)

            for page_number in range(1, request.max_pages + 1):
                channel, rows = row_source.read_rows(page)
                pages_visited = page_number
                page_deals = self._normalizer.normalize_rows(
                    rows,
                    request=request,
                    source_url=page.url,
                )
                inserted = self._storage.insert_deals(page_deals)
                deals.extend(page_deals)
                log_event(
                    logger,
                    logging.INFO,
                    "deal_page_scraped",
                    address_id=address_id,
                    page=page_number,
                    channel=channel,
                    rows=len(rows),
                    inserted=inserted,
                    total=len(deals),
                )

                if not rows or page_number == request.max_pages:
                    break
                page.wait_for_timeout(self._settings.inter_page_delay_ms)
                if not self._go_to_next_page(page, api_source):
                    log_event(logger, logging.INFO, "deal_pages_exhausted", page=page_number)
                    break

        return ExtractionResult(
            deals=deals,
            pages_visited=pages_visited,
            trend_snapshot=trend_snapshot,
        )

    def _open_deals_page(self, page: Page, url: str) -> None:
        page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self._settings.navigation_timeout_ms,
        )
        try:
            page.wait_for_selector(ROWS_READY_SELECTOR, timeout=self._settings.rows_render_timeout_ms)
        except PlaywrightError:
            logger.debug("Deals table did not render within %sms", self._settings.rows_render_timeout_ms)

        for _ in range(_SCROLL_PASSES):
            page.mouse.wheel(0, _SCROLL_DELTA_Y)
            page.wait_for_timeout(500)
        page.wait_for_timeout(2000)

    def _read_trends(self, page: Page, request: ScrapeRequest) -> TrendSnapshot | None:
        try:
            return self._trend_extractor.extract_from_page(page, city_name=request.city_name)
        except PlaywrightError as exc:
            logger.warning("Trend snapshot unavailable: %s", exc)
            return None

    def _go_to_next_page(self, page: Page, api_source: ApiResponseRowSource) -> bool:
        """
        Click the first visible "next" control and wait for the page to change.

        Returns False when no next control is visible.
        """

        before_key = self._first_row_key(page)
        responses_before = api_source.responses_seen

        for selector in NEXT_PAGE_SELECTORS:
            control = page.locator(selector).first
            try:
                visible = control.is_visible()
            except PlaywrightError:
                visible = False
            if not visible:
                continue

            for attempt in range(1, _CLICK_ATTEMPTS + 1):
                try:
                    control.click(timeout=3000)
                    break
                except PlaywrightError as exc:
                    logger.debug("Next click failed attempt=%s error=%s", attempt, exc)
                    page.wait_for_timeout(300)

            self._wait_for_page_change(
                page,
                api_source,
                before_key=before_key,
                responses_before=responses_before,
            )
            return True
        return False

    def _wait_for_page_change(
        self,
        page: Page,
        api_source: ApiResponseRowSource,
        *,
        before_key: str,
        responses_before: int,
    ) -> None:
        deadline = time.monotonic() + self._settings.next_page_timeout_ms / 1000
        while time.monotonic() < deadline:
            if api_source.responses_seen > responses_before:
                return
            current_key = self._first_row_key(page)
            if current_key and current_key != before_key:
                return
            page.wait_for_timeout(_PAGE_CHANGE_POLL_MS)
        log_event(
            logger,
            logging.WARNING,
            "next_page_wait_timeout",
            timeout_ms=self._settings.next_page_timeout_ms,
        )

    @staticmethod
    def _first_row_key(page: Page) -> str:
        try:
            return page.evaluate(FIRST_ROW_KEY_SCRIPT) or ""
        except PlaywrightError:
            return ""
