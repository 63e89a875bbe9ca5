"""
Headless Chromium sessions for the nadlan.gov.il pages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Callable

from playwright.sync_api import Page, Route, sync_playwright

from app.config import NadlanScrapingSettings

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]
BLOCKED_RESOURCE_TYPES = frozenset({"image", "media", "font", "stylesheet"})

BrowserSessionFactory = Callable[[NadlanScrapingSettings], AbstractContextManager[Page]]


def _abort_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


@contextmanager
def browser_session(settings: NadlanScrapingSettings) -> Iterator[Page]:
    """
    Yield a fresh page in its own browser; the browser is closed on every exit path.
    """

    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)
        try:
            context = browser.new_context(locale=settings.locale)
            if settings.block_resources:
                context.route("**/*", _abort_heavy_resources)
            page = context.new_page()
            page.set_default_navigation_timeout(settings.navigation_timeout_ms)
            logger.debug("Browser session opened locale=%s", settings.locale)
            yield page
        finally:
            browser.close()
            logger.debug("Browser session closed")
