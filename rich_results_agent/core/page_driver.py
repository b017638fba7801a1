"""
Page automation surface used by the state machine, and its Playwright implementation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

from playwright.async_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeout,
)

from ..error_handling import ElementNotFoundError, NavigationError, PageLoadError
from .signals import INPUT_SELECTOR, ElementQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipRegion:
    """Rectangle of the page to highlight and capture, in CSS pixels."""
    x: int = 0
    y: int = 0
    width: int = 1024
    height: int = 768

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Clip origin must be non-negative, got ({self.x}, {self.y})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Clip size must be positive, got {self.width}x{self.height}")

    def as_clip(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class PageDriver(Protocol):
    """Capabilities the completion state machine needs from the remote page."""

    async def observe(self) -> str:
        """Return the currently visible text of the page."""
        ...

    async def has_element(self, query: ElementQuery) -> bool:
        ...

    async def activate_control(self, query: ElementQuery) -> bool:
        """Click the first matching control. Returns False when none is present."""
        ...

    async def submit_input(self, value: str) -> None:
        """Enter ``value`` into the input surface and confirm it."""
        ...

    async def confirm_input(self) -> None:
        """Repeat the confirmation action on the already-filled input."""
        ...


_OVERLAY_SCRIPT = """
({ x, y, width, height }) => {
    const existing = document.getElementById("__clipOverlay");
    if (existing) existing.remove();

    const overlay = document.createElement("div");
    overlay.id = "__clipOverlay";
    overlay.style.position = "absolute";
    overlay.style.top = `${y}px`;
    overlay.style.left = `${x}px`;
    overlay.style.width = `${width}px`;
    overlay.style.height = `${height}px`;
    overlay.style.border = "2px solid red";
    overlay.style.zIndex = "999999";
    overlay.style.pointerEvents = "none";
    document.body.appendChild(overlay);
}
"""


class PlaywrightPageDriver:
    """
    Drives the Rich Results Test page through a Playwright ``Page``.

    Interactions are paced to look like a person: the mouse glides to the
    input before clicking and keystrokes are typed with a delay.
    """

    def __init__(
        self,
        page: Page,
        input_selector: str = INPUT_SELECTOR,
        *,
        type_delay_ms: int = 100,
        mouse_steps: int = 20,
        mouse_pause_ms: int = 200,
    ):
        self.page = page
        self.input_selector = input_selector
        self.type_delay_ms = type_delay_ms
        self.mouse_steps = mouse_steps
        self.mouse_pause_ms = mouse_pause_ms

    def _locate(self, query: ElementQuery) -> Locator:
        if query.text is not None:
            return self.page.locator(query.selector, has_text=query.text)
        return self.page.locator(query.selector)

    async def navigate(self, url: str, wait_until: str = "domcontentloaded") -> None:
        """Load ``url``; raises PageLoadError on timeout, NavigationError otherwise."""
        try:
            response = await self.page.goto(url, wait_until=wait_until)
        except PlaywrightTimeout as e:
            raise PageLoadError(f"Page load timeout for {url}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation failed for {url}: {e}") from e
        logger.info(f"Navigated to {url} (status {response.status if response else 'n/a'})")

    async def wait_for_input(self, timeout_ms: Optional[float] = None) -> None:
        try:
            await self.page.wait_for_selector(
                self.input_selector, state="visible", timeout=timeout_ms
            )
        except PlaywrightTimeout as e:
            raise ElementNotFoundError(
                f"URL input not visible: {self.input_selector}"
            ) from e

    async def observe(self) -> str:
        return await self.page.inner_text("body")

    async def has_element(self, query: ElementQuery) -> bool:
        return await self._locate(query).count() > 0

    async def activate_control(self, query: ElementQuery) -> bool:
        locator = self._locate(query)
        if await locator.count() == 0:
            logger.debug(f"No {query.name} to activate")
            return False
        try:
            await locator.first.click()
        except PlaywrightError as e:
            logger.warning(f"Could not activate {query.name}: {e}")
            return False
        logger.info(f"Activated {query.name}")
        return True

    async def _point_at_input(self) -> None:
        target = self.page.locator(self.input_selector).first
        box = await target.bounding_box()
        if box is None:
            # Not laid out yet; focusing is enough to receive keystrokes
            logger.debug("Input has no bounding box, focusing instead")
            await self.page.focus(self.input_selector)
            return

        click_x = box["x"] + box["width"] / 2
        click_y = box["y"] + box["height"] / 2
        await self.page.mouse.move(click_x, click_y, steps=self.mouse_steps)
        await self.page.wait_for_timeout(self.mouse_pause_ms)
        await self.page.mouse.click(click_x, click_y)

    async def submit_input(self, value: str) -> None:
        await self._point_at_input()
        await self.page.keyboard.type(value, delay=self.type_delay_ms)
        await self.page.keyboard.press("Enter")
        logger.info(f"Submitted {value}")

    async def confirm_input(self) -> None:
        await self.page.wait_for_selector(self.input_selector, state="visible")
        await self.page.focus(self.input_selector)
        await self.page.keyboard.press("Enter")

    async def draw_overlay(self, region: ClipRegion) -> None:
        """Outline ``region`` with a red box so the capture shows what was clipped."""
        await self.page.evaluate(_OVERLAY_SCRIPT, region.as_clip())

    async def capture(self, region: ClipRegion, path: Union[str, Path]) -> bytes:
        data = await self.page.screenshot(path=str(path), clip=region.as_clip())
        logger.info(f"Screenshot saved: {path}")
        return data
