"""Shared fakes: a controllable clock and a scripted page driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Sequence

import pytest

from rich_results_agent.core.signals import (
    DISMISS_CONTROL,
    PROCESSING_INDICATOR,
    STRUCTURED_DATA,
    VIEW_DETAILS,
    ElementQuery,
)


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass(frozen=True)
class Frame:
    """What the page looks like during one observation."""
    text: str = ""
    elements: FrozenSet[str] = frozenset()


ERROR = Frame(text="Something went wrong. Please try again.", elements=frozenset({DISMISS_CONTROL.name}))
ERROR_NO_DISMISS = Frame(text="Something went wrong")
PROCESSING = Frame(text="Testing live URL", elements=frozenset({PROCESSING_INDICATOR.name}))
BLANK = Frame(text="Rich Results Test")
DONE_TEXT = Frame(text="Crawled successfully TEST COMPLETE")
DONE_DETAILS = Frame(text="2 valid items detected", elements=frozenset({VIEW_DETAILS.name}))
DONE_JSON = Frame(text='{"@type": "Product"}', elements=frozenset({STRUCTURED_DATA.name}))


@dataclass
class FakeDriver:
    """
    Scripted stand-in for the Playwright page.

    Each ``observe()`` call moves to the next frame; the last frame repeats
    once the script runs out.
    """
    frames: Sequence[Frame] = (BLANK,)
    calls: List[str] = field(default_factory=list)
    _index: int = -1

    @property
    def current(self) -> Frame:
        return self.frames[max(0, min(self._index, len(self.frames) - 1))]

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def observe(self) -> str:
        self.calls.append("observe")
        self._index += 1
        return self.current.text

    async def has_element(self, query: ElementQuery) -> bool:
        self.calls.append(f"has_element:{query.name}")
        return query.name in self.current.elements

    async def activate_control(self, query: ElementQuery) -> bool:
        self.calls.append(f"activate:{query.name}")
        return query.name in self.current.elements

    async def submit_input(self, value: str) -> None:
        self.calls.append(f"submit:{value}")

    async def confirm_input(self) -> None:
        self.calls.append("confirm")

    # Workflow-only operations
    async def navigate(self, url: str) -> None:
        self.calls.append(f"navigate:{url}")

    async def wait_for_input(self) -> None:
        self.calls.append("wait_for_input")

    async def draw_overlay(self, region) -> None:
        self.calls.append("overlay")

    async def capture(self, region, path) -> bytes:
        self.calls.append(f"capture:{path}")
        return b""


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
