"""
Browser surface using Playwright for client-rendered job pages.

A single long-lived browser page carries the LinkedIn session. Only one
enrichment attempt may drive it at a time: callers take an exclusive lease,
which is released on exit even when the attempt fails.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from core.net import DEFAULT_UA
from pipeline.errors import LeaseExpired, RenderSurfaceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 30000


class SurfaceLease:
    """Exclusive, scoped handle on the surface's page."""

    def __init__(self, page: Page, navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS):
        self._page: Optional[Page] = page
        self.navigation_timeout_ms = navigation_timeout_ms

    @property
    def page(self) -> Page:
        if self._page is None:
            raise LeaseExpired("Browser surface lease used after release")
        return self._page

    @property
    def released(self) -> bool:
        return self._page is None

    def release(self) -> None:
        self._page = None

    async def goto(self, url: str) -> str:
        """
        Navigate and return the final URL after redirects.
        """
        page = self.page
        await page.goto(url, wait_until='domcontentloaded', timeout=self.navigation_timeout_ms)
        return page.url


class BrowserSurface:
    """Owns the shared browser page used for tier-2 extraction"""

    def __init__(self, cookies: Optional[List[Dict]] = None, headless: bool = True,
                 navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS):
        self.cookies = cookies or []
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config, cookies: Optional[List[Dict]] = None, headed: bool = False) -> "BrowserSurface":
        """Build from EnrichmentConfig; headed forces a visible window."""
        return cls(cookies=cookies, headless=config.browser_headless and not headed)

    @property
    def available(self) -> bool:
        return self._page is not None

    async def start(self) -> None:
        """Launch the browser and load the session cookies."""
        if self._page is not None:
            return
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        self._context = await self._browser.new_context(
            user_agent=DEFAULT_UA,
            extra_http_headers={'Accept-Language': 'en-US,en;q=0.9'},
        )
        if self.cookies:
            await self._context.add_cookies([_to_playwright_cookie(c) for c in self.cookies])
        self._page = await self._context.new_page()
        logger.info(f"[browser] Surface started (headless={self.headless}, cookies={len(self.cookies)})")

    async def close(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None

    async def __aenter__(self) -> "BrowserSurface":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[SurfaceLease]:
        """
        Acquire the page exclusively for one enrichment attempt.

        Raises:
            RenderSurfaceUnavailable: If the surface was never started or is closed
        """
        if self._page is None:
            raise RenderSurfaceUnavailable("Browser surface is not started")
        async with self._lock:
            lease = SurfaceLease(self._page, self.navigation_timeout_ms)
            try:
                yield lease
            finally:
                lease.release()


def _to_playwright_cookie(cookie: Dict) -> Dict:
    """Keep only the keys Playwright's add_cookies accepts."""
    allowed = ('name', 'value', 'domain', 'path', 'expires', 'httpOnly', 'secure', 'sameSite')
    converted = {k: cookie[k] for k in allowed if k in cookie and cookie[k] is not None}
    converted.setdefault('path', '/')
    if converted.get('sameSite') not in (None, 'Strict', 'Lax', 'None'):
        converted.pop('sameSite')
    return converted
