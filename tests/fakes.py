"""
Test doubles for Playwright pages and deal storage.

The fakes implement only the Page surface the scraper touches, so tests run
without a browser or a database.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import nullcontext
from html import escape
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from app.domain.nadlan import Deal, ScrapeRequest, TrendSnapshot
from app.scraping.resolver import SEARCH_INPUT_SELECTOR
from app.scraping.storage.base import DealStorage

DEAL_HEADERS = (
    "מספר סידורי",
    "כתובת",
    'שטח במ"ר',
    "תאריך העסקה",
    "מחיר העסקה",
    "גוש/חלקה/תת-חלקה",
    "סוג נכס",
    "חדרים",
    "קומה",
    "מגמת שינוי",
)
NAV_TABLE_HTML = "<table id='nav'><tbody><tr><td>ראשי</td></tr></tbody></table>"


def session_factory_for(page: Any) -> Callable[[Any], Any]:
    return lambda settings: nullcontext(page)


def deal_row(index: int, *, page_number: int = 1) -> dict[str, str]:
    return {
        "מספר סידורי": str(index),
        "כתובת": "הרצל 10",
        'שטח במ"ר': str(60 + index),
        "תאריך העסקה": f"{(index % 28) + 1:02d}/{(page_number % 12) + 1:02d}/2023",
        "מחיר העסקה": f"{1_000_000 + page_number * 10_000 + index:,} ₪",
        "גוש/חלקה/תת-חלקה": f"6{page_number}12-{index}-0",
        "סוג נכס": "דירה",
        "חדרים": "3.5",
        "קומה": str(index % 9),
        "מגמת שינוי": "",
    }


def deals_table_html(
    rows: Sequence[dict[str, str]],
    *,
    headers: Sequence[str] = DEAL_HEADERS,
    with_nav_table: bool = False,
) -> str:
    head = "".join(f"<th>{escape(header)}</th>" for header in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(str(row.get(header, '')))}</td>" for header in headers) + "</tr>"
        for row in rows
    )
    return (
        "<html><body>"
        + (NAV_TABLE_HTML if with_nav_table else "")
        + f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
        + "</body></html>"
    )


class FakeMouse:
    def __init__(self) -> None:
        self.wheel_calls: list[tuple[int, int]] = []

    def wheel(self, delta_x: int, delta_y: int) -> None:
        self.wheel_calls.append((delta_x, delta_y))


class FakeKeyboard:
    def __init__(self) -> None:
        self.pressed: list[str] = []

    def press(self, key: str) -> None:
        self.pressed.append(key)


class FakeRequest:
    def __init__(self, method: str) -> None:
        self.method = method


class FakeResponse:
    def __init__(
        self,
        url: str,
        payload: Any,
        *,
        method: str = "POST",
        content_type: str = "application/json; charset=utf-8",
    ) -> None:
        self.url = url
        self.request = FakeRequest(method)
        self.headers = {"content-type": content_type}
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeLocator:
    def __init__(
        self,
        *,
        texts: Sequence[str] = (),
        visible: bool = False,
        on_click: Callable[[], None] | None = None,
    ) -> None:
        self._texts = list(texts)
        self._visible = visible
        self._on_click = on_click
        self.clicks = 0

    @property
    def first(self) -> FakeLocator:
        return self

    def all_text_contents(self) -> list[str]:
        return list(self._texts)

    def is_visible(self) -> bool:
        return self._visible

    def wait_for(self, timeout: float | None = None) -> None:
        if self._on_click is None:
            raise PlaywrightError("element not found")

    def click(self, timeout: float | None = None) -> None:
        if self._on_click is None:
            raise PlaywrightError("element not clickable")
        self.clicks += 1
        self._on_click()


class FakePageBase:
    def __init__(self) -> None:
        self.url = "about:blank"
        self.mouse = FakeMouse()
        self.keyboard = FakeKeyboard()
        self.waited_ms: list[float] = []
        self.visited: list[str] = []

    def goto(self, url: str, **kwargs: Any) -> None:
        self.url = url
        self.visited.append(url)

    def wait_for_timeout(self, timeout: float) -> None:
        self.waited_ms.append(timeout)

    def wait_for_selector(self, selector: str, timeout: float | None = None) -> None:
        return None


class FakeInput:
    def __init__(self, page: FakeSearchPage) -> None:
        self._page = page

    def is_visible(self) -> bool:
        return True

    def click(self, timeout: float | None = None) -> None:
        return None

    def fill(self, value: str) -> None:
        self._page.current_query = value
        self._page.queries.append(value)

    def press(self, key: str) -> None:
        target = self._page.enter_results.get(self._page.current_query)
        if key == "Enter" and target:
            self._page.url = target


class FakeSearchPage(FakePageBase):
    """
    Home page with a search box.

    ``suggestions`` maps a typed query to suggestion texts; ``suggestion_urls``
    maps a suggestion text to the URL reached by clicking it;
    ``enter_results`` maps a query to the URL reached by pressing Enter.
    """

    def __init__(
        self,
        *,
        suggestions: dict[str, list[str]] | None = None,
        suggestion_urls: dict[str, str] | None = None,
        enter_results: dict[str, str] | None = None,
        has_input: bool = True,
    ) -> None:
        super().__init__()
        self.suggestions = suggestions or {}
        self.suggestion_urls = suggestion_urls or {}
        self.enter_results = enter_results or {}
        self.has_input = has_input
        self.current_query = ""
        self.queries: list[str] = []
        self.clicked_suggestions: list[str] = []
        self._input = FakeInput(self)

    def query_selector(self, selector: str) -> FakeInput | None:
        if self.has_input and selector in (SEARCH_INPUT_SELECTOR, "input"):
            return self._input
        return None

    def locator(self, selector: str) -> FakeLocator:
        if selector == "li":
            return FakeLocator(texts=self.suggestions.get(self.current_query, []))
        if selector.startswith('text="'):
            text = selector[len('text="') : -1]
            target = self.suggestion_urls.get(text)
            if target is None:
                return FakeLocator()
            return FakeLocator(visible=True, on_click=lambda: self._navigate(text, target))
        return FakeLocator()

    def wait_for_url(self, predicate: Callable[[str], bool], timeout: float | None = None) -> None:
        if not predicate(self.url):
            raise PlaywrightError("Timeout waiting for URL")

    def _navigate(self, text: str, target: str) -> None:
        self.clicked_suggestions.append(text)
        self.url = target


class FakeDealsPage(FakePageBase):
    """
    Deals page with ``pages`` of header-keyed rows.

    In ``api`` mode every page load also emits a ``/api/deal`` response with
    the rows as items; in ``dom`` mode rows only exist in the HTML table.
    """

    def __init__(
        self,
        pages: Sequence[Sequence[dict[str, str]]],
        *,
        mode: str = "dom",
        body_text: str = "",
    ) -> None:
        super().__init__()
        self.pages = [list(rows) for rows in pages]
        self.mode = mode
        self.body_text = body_text
        self.index = 0
        self.next_clicks = 0
        self._handlers: dict[str, list[Callable[[Any], None]]] = {}

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def goto(self, url: str, **kwargs: Any) -> None:
        super().goto(url, **kwargs)
        self._emit_api_response()

    def inner_text(self, selector: str) -> str:
        return self.body_text

    def content(self) -> str:
        rows = self.pages[self.index] if self.index < len(self.pages) else []
        return deals_table_html(rows)

    def evaluate(self, script: str) -> str:
        rows = self.pages[self.index] if self.index < len(self.pages) else []
        return " ".join(str(value) for value in rows[0].values())[:120] if rows else ""

    def locator(self, selector: str) -> FakeLocator:
        has_next = self.index < len(self.pages) - 1
        if selector == 'a:has-text("הבא")' and has_next:
            return FakeLocator(visible=True, on_click=self._next_page)
        return FakeLocator()

    def _next_page(self) -> None:
        self.next_clicks += 1
        self.index += 1
        self._emit_api_response()

    def _emit_api_response(self) -> None:
        if self.mode != "api" or self.index >= len(self.pages):
            return
        response = FakeResponse(
            "https://www.nadlan.gov.il/api/deal",
            {"data": {"items": self.pages[self.index]}},
        )
        for handler in self._handlers.get("response", []):
            handler(response)


class InMemoryDealStorage(DealStorage):
    """
    Storage double that mimics the unique dedupe_key constraint.
    """

    def __init__(self, *, fail_on_call: int | None = None) -> None:
        self.keys: set[str] = set()
        self.batches: list[list[Deal]] = []
        self.trend_upserts: list[tuple[str, ScrapeRequest, TrendSnapshot]] = []
        self._fail_on_call = fail_on_call

    def insert_deals(self, deals: Sequence[Deal]) -> int:
        if not deals:
            return 0
        self.batches.append(list(deals))
        if self._fail_on_call is not None and len(self.batches) == self._fail_on_call:
            from app.scraping.errors import PersistenceError

            raise PersistenceError("database is gone")
        inserted = 0
        for deal in deals:
            if deal.dedupe_key not in self.keys:
                self.keys.add(deal.dedupe_key)
                inserted += 1
        return inserted

    def upsert_trend_snapshot(
        self,
        *,
        address_id: str,
        request: ScrapeRequest,
        snapshot: TrendSnapshot,
    ) -> bool:
        self.trend_upserts.append((address_id, request, snapshot))
        return True
