"""
Row sources for one page of deals.

Two independent channels feed the extractor:

- ``ApiResponseRowSource`` passively captures the JSON the page itself
  fetches from ``/api/deal`` and treats it as ground truth;
- ``BestTableRowSource`` parses the rendered DOM and reads the largest table.

``PrioritizedRowSource`` asks each source in order and keeps the first
non-empty answer.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from bs4 import BeautifulSoup, Tag
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, Response

from app.domain.nadlan import RawRow

logger = logging.getLogger(__name__)

DEAL_API_FRAGMENT = "/api/deal"
TABLE_SELECTOR = 'table, [role="table"]'
ROW_SELECTOR = 'tbody tr, tr[role="row"]'
HEADER_SELECTOR = 'thead th, th[role="columnheader"]'


class RowSource(Protocol):
    name: str

    def read_rows(self, page: Page) -> list[RawRow]:
        ...


def extract_api_items(payload: Any) -> list[RawRow]:
    """
    Pull the item list out of a deals API payload (``data.items`` or ``items``).
    """

    if not isinstance(payload, dict):
        return []
    data = payload.get("data")
    items = data.get("items") if isinstance(data, dict) else None
    if not items:
        items = payload.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


class ApiResponseRowSource:
    """
    Buffers the latest deals API response observed on the page.
    """

    name = "api"

    def __init__(self, *, endpoint_fragment: str = DEAL_API_FRAGMENT) -> None:
        self._endpoint_fragment = endpoint_fragment
        self._buffer: list[RawRow] = []
        self.responses_seen = 0

    def attach(self, page: Page) -> None:
        page.on("response", self.handle_response)

    def handle_response(self, response: Response) -> None:
        if self._endpoint_fragment not in response.url or response.request.method != "POST":
            return
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return
        try:
            payload = response.json()
        except (PlaywrightError, ValueError) as exc:
            logger.debug("Unreadable deals API response url=%s error=%s", response.url, exc)
            return

        items = extract_api_items(payload)
        if items:
            self._buffer = items
            self.responses_seen += 1

    def has_pending(self) -> bool:
        return bool(self._buffer)

    def read_rows(self, page: Page) -> list[RawRow]:
        rows, self._buffer = self._buffer, []
        return rows


def _cell_text(node: Tag) -> str:
    return node.get_text(" ", strip=True)


def parse_best_table(html: str) -> list[RawRow]:
    """
    Read rows from the table with the most body rows.

    Rows are keyed by header text when the header count matches the cell
    count, otherwise returned positionally as ``{"raw": [cells...]}``.
    """

    soup = BeautifulSoup(html or "", "html.parser")
    best: Tag | None = None
    best_rows: list[Tag] = []
    for table in soup.select(TABLE_SELECTOR):
        rows = table.select(ROW_SELECTOR)
        if len(rows) > len(best_rows):
            best, best_rows = table, rows

    if best is None:
        return []

    headers = [_cell_text(cell) for cell in best.select(HEADER_SELECTOR)]
    parsed: list[RawRow] = []
    for row in best_rows:
        cells = [_cell_text(cell) for cell in row.find_all("td")]
        if headers and len(headers) == len(cells):
            parsed.append(
                {header or f"col_{index}": cell for index, (header, cell) in enumerate(zip(headers, cells), start=1)}
            )
        else:
            parsed.append({"raw": cells})
    return parsed


class BestTableRowSource:
    """
    DOM fallback: parse the rendered HTML and read the biggest table.
    """

    name = "dom"

    def read_rows(self, page: Page) -> list[RawRow]:
        return parse_best_table(page.content())


class PrioritizedRowSource:
    """
    Try sources in priority order; the first one with rows wins.
    """

    def __init__(self, sources: Sequence[RowSource]) -> None:
        self._sources = list(sources)

    def read_rows(self, page: Page) -> tuple[str | None, list[RawRow]]:
        for source in self._sources:
            rows = source.read_rows(page)
            if rows:
                return source.name, rows
        return None, []
