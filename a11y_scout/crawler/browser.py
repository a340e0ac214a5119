# a11y_scout/crawler/browser.py
"""
Playwright browser driver: loads pages and hands out page handles to the
auditor and the link extractor.
"""
from __future__ import annotations

from typing import List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from a11y_scout.config import CrawlConfig
from a11y_scout.crawler.link_extractor import anchor_hrefs
from a11y_scout.errors import AuditFailure
from a11y_scout.logger import logger

__all__ = ("PlaywrightBrowser",)


class PlaywrightBrowser:
    """Chromium session shared by all pages of one crawl run.

    Use as an async context manager::

        async with PlaywrightBrowser(config) as browser:
            page = await browser.navigate(url)
            ...
            await browser.release(page)
    """

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> PlaywrightBrowser:
        logger.info("Launching chromium (headless=%s)", self.config.headless)
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
        self._context = await self._browser.new_context(user_agent=self.config.user_agent)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser closed")

    async def navigate(self, url: str) -> Page:
        """Open *url* in a new tab. Raises AuditFailure on HTTP errors."""
        if self._context is None:
            raise RuntimeError(
                "Browser is not running. Use PlaywrightBrowser as an async context manager."
            )
        page = await self._context.new_page()
        try:
            response = await page.goto(
                url, wait_until="load", timeout=self.config.navigation_timeout * 1000
            )
        except Exception:
            await page.close()
            raise
        if response is not None and response.status >= 400:
            await page.close()
            raise AuditFailure(url, f"HTTP {response.status}")
        return page

    async def extract_links(self, page: Page) -> List[str]:
        return anchor_hrefs(await page.content())

    async def release(self, page: Page) -> None:
        if not page.is_closed():
            await page.close()
