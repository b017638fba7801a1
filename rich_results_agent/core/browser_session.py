"""
Async browser lifecycle using Playwright.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from ..config import BrowserConfig
from ..error_handling import BrowserConnectionError

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    Owns one Chromium instance and the single page a task runs on.

    When ``config.user_data_dir`` is set the browser is launched as a
    persistent context backed by that directory, so cookies and consent
    state survive between runs. Otherwise a throwaway context is used.
    """

    def __init__(self, config: Optional[BrowserConfig] = None, default_timeout: float = 60.0):
        self.config = config or BrowserConfig()
        self.default_timeout = default_timeout

        # Playwright components
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

        self._active = False

    def _context_options(self) -> dict:
        return {
            "viewport": {
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
            "locale": self.config.locale,
            "extra_http_headers": {
                "Accept-Language": f"{self.config.locale},en;q=0.9"
            },
        }

    async def start(self) -> None:
        """Launch the browser and open the working page."""
        if self._active:
            logger.warning("Browser already active")
            return

        try:
            self._playwright = await async_playwright().start()
            chromium = self._playwright.chromium
            args = [
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
            ]

            if self.config.user_data_dir:
                profile_path = Path(self.config.user_data_dir)
                profile_path.mkdir(parents=True, exist_ok=True)
                self._context = await chromium.launch_persistent_context(
                    str(profile_path),
                    headless=self.config.headless,
                    args=args,
                    **self._context_options(),
                )
                logger.info(f"Using persistent profile at {profile_path}")
            else:
                self._browser = await chromium.launch(headless=self.config.headless, args=args)
                self._context = await self._browser.new_context(**self._context_options())

            if self._context.pages:
                self._page = self._context.pages[0]
            else:
                self._page = await self._context.new_page()

            # Playwright timeouts are in milliseconds
            self._page.set_default_timeout(self.default_timeout * 1000)

            self._active = True
            logger.info("✅ Browser session started")

        except Exception as e:
            await self.close()
            raise BrowserConnectionError(f"Failed to start browser: {e}") from e

    @property
    def page(self) -> Page:
        """Get current page for direct Playwright API access."""
        if not self._page:
            raise BrowserConnectionError("Browser not started")
        return self._page

    @property
    def is_active(self) -> bool:
        return self._active

    async def close(self) -> None:
        """Close browser with proper cleanup."""
        try:
            if self._context:
                await self._context.close()
            if self._browser:
                await self._browser.close()
            if self._playwright:
                await self._playwright.stop()
            logger.info("Browser session closed")
        except Exception as e:
            logger.warning(f"Error during browser cleanup: {e}")
        finally:
            self._context = None
            self._browser = None
            self._playwright = None
            self._page = None
            self._active = False

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
