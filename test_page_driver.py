"""Tests for the Playwright page driver against a stub page object."""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from rich_results_agent.core.page_driver import ClipRegion, PlaywrightPageDriver
from rich_results_agent.core.signals import DISMISS_CONTROL, INPUT_SELECTOR, VIEW_DETAILS
from rich_results_agent.error_handling import ElementNotFoundError, NavigationError, PageLoadError


class StubLocator:
    def __init__(self, page, selector, has_text=None):
        self.page = page
        self.selector = selector
        self.has_text = has_text

    @property
    def first(self):
        return self

    async def count(self):
        return self.page.counts.get(self.selector, 0)

    async def bounding_box(self):
        return self.page.box

    async def click(self):
        if self.page.click_error:
            raise self.page.click_error
        self.page.calls.append(("click", self.selector))


class StubInput:
    def __init__(self, page, kind):
        self.page = page
        self.kind = kind

    async def move(self, x, y, steps=1):
        self.page.calls.append(("move", x, y, steps))

    async def click(self, x, y):
        self.page.calls.append(("mouse_click", x, y))

    async def type(self, text, delay=0):
        self.page.calls.append(("type", text, delay))

    async def press(self, key):
        self.page.calls.append(("press", key))


class StubPage:
    def __init__(self, *, box=None, counts=None, click_error=None, goto_error=None, text=""):
        self.box = box
        self.counts = counts or {}
        self.click_error = click_error
        self.goto_error = goto_error
        self.text = text
        self.calls = []
        self.mouse = StubInput(self, "mouse")
        self.keyboard = StubInput(self, "keyboard")

    def locator(self, selector, has_text=None):
        return StubLocator(self, selector, has_text)

    async def focus(self, selector):
        self.calls.append(("focus", selector))

    async def wait_for_timeout(self, ms):
        self.calls.append(("pause", ms))

    async def wait_for_selector(self, selector, state="visible", timeout=None):
        if self.counts.get(selector, 0) == 0:
            raise PlaywrightTimeout(f"waiting for {selector}")
        self.calls.append(("wait", selector))

    async def goto(self, url, wait_until="load"):
        if self.goto_error:
            raise self.goto_error
        self.calls.append(("goto", url, wait_until))
        return None

    async def inner_text(self, selector):
        return self.text

    async def evaluate(self, script, arg=None):
        self.calls.append(("evaluate", arg))

    async def screenshot(self, path=None, clip=None):
        self.calls.append(("screenshot", path, clip))
        return b"png"


def test_submit_moves_mouse_to_input_centre() -> None:
    page = StubPage(box={"x": 100, "y": 50, "width": 200, "height": 20})
    driver = PlaywrightPageDriver(page)

    asyncio.run(driver.submit_input("https://example.com"))

    assert page.calls == [
        ("move", 200.0, 60.0, 20),
        ("pause", 200),
        ("mouse_click", 200.0, 60.0),
        ("type", "https://example.com", 100),
        ("press", "Enter"),
    ]


def test_submit_falls_back_to_focus_without_bounding_box() -> None:
    page = StubPage(box=None)
    driver = PlaywrightPageDriver(page, type_delay_ms=0)

    asyncio.run(driver.submit_input("https://example.com"))

    assert page.calls[0] == ("focus", INPUT_SELECTOR)
    assert ("type", "https://example.com", 0) in page.calls
    assert not any(call[0] == "move" for call in page.calls)


def test_confirm_presses_enter_on_focused_input() -> None:
    page = StubPage(counts={INPUT_SELECTOR: 1})

    asyncio.run(PlaywrightPageDriver(page).confirm_input())

    assert page.calls == [("wait", INPUT_SELECTOR), ("focus", INPUT_SELECTOR), ("press", "Enter")]


def test_activate_control_absent_returns_false() -> None:
    page = StubPage()

    assert asyncio.run(PlaywrightPageDriver(page).activate_control(DISMISS_CONTROL)) is False
    assert page.calls == []


def test_activate_control_swallows_click_failures() -> None:
    page = StubPage(counts={"button": 1}, click_error=PlaywrightError("detached"))

    assert asyncio.run(PlaywrightPageDriver(page).activate_control(DISMISS_CONTROL)) is False


def test_activate_control_clicks_present_control() -> None:
    page = StubPage(counts={"button": 1})

    assert asyncio.run(PlaywrightPageDriver(page).activate_control(DISMISS_CONTROL)) is True
    assert page.calls == [("click", "button")]


def test_has_element_counts_matches() -> None:
    page = StubPage(counts={VIEW_DETAILS.selector: 2})
    driver = PlaywrightPageDriver(page)

    assert asyncio.run(driver.has_element(VIEW_DETAILS)) is True
    assert asyncio.run(driver.has_element(DISMISS_CONTROL)) is False


@pytest.mark.parametrize(
    "error, expected",
    [(PlaywrightTimeout("timeout"), PageLoadError), (PlaywrightError("net::ERR"), NavigationError)],
)
def test_navigate_maps_playwright_errors(error, expected) -> None:
    driver = PlaywrightPageDriver(StubPage(goto_error=error))

    with pytest.raises(expected):
        asyncio.run(driver.navigate("https://search.google.com/test/rich-results"))


def test_wait_for_input_timeout_is_element_not_found() -> None:
    with pytest.raises(ElementNotFoundError):
        asyncio.run(PlaywrightPageDriver(StubPage()).wait_for_input())


def test_overlay_and_capture_use_the_clip_region(tmp_path) -> None:
    page = StubPage()
    driver = PlaywrightPageDriver(page)
    region = ClipRegion(10, 20, 300, 200)
    path = tmp_path / "shot.png"

    asyncio.run(driver.draw_overlay(region))
    data = asyncio.run(driver.capture(region, path))

    clip = {"x": 10, "y": 20, "width": 300, "height": 200}
    assert page.calls == [("evaluate", clip), ("screenshot", str(path), clip)]
    assert data == b"png"


@pytest.mark.parametrize("args", [(-1, 0, 10, 10), (0, 0, 0, 10), (0, 0, 10, -5)])
def test_clip_region_rejects_bad_geometry(args) -> None:
    with pytest.raises(ValueError):
        ClipRegion(*args)
