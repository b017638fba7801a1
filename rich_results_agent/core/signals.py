"""
Signal detection for the Rich Results Test page.

The remote UI is not under our control, so every signal is matched loosely:
regular expressions over the visible text, or attribute-substring selectors.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Pattern

if TYPE_CHECKING:
    from .page_driver import PageDriver


class Signal(Enum):
    """Classification of a single observation of the remote page."""
    ERROR = "error"
    PROCESSING = "processing"
    COMPLETE = "complete"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class ElementQuery:
    """A selector-like predicate understood by the page driver."""
    name: str
    selector: str
    text: Optional[Pattern[str]] = None


ERROR_TEXT = re.compile(r"something went wrong", re.IGNORECASE)
COMPLETE_TEXT = re.compile(r"\bTEST COMPLETE\b", re.IGNORECASE)

INPUT_SELECTOR = 'input[type="url"], input[type="text"], input#url'

PROCESSING_INDICATOR = ElementQuery(
    name="processing indicator",
    selector='div[class*="LoadingSpinner"], div[aria-label*="Testing"]',
)
VIEW_DETAILS = ElementQuery(
    name="view details",
    selector='button[aria-label*="View details"]',
)
STRUCTURED_DATA = ElementQuery(name="structured data block", selector="pre")
DISMISS_CONTROL = ElementQuery(
    name="dismiss button",
    selector="button",
    text=re.compile(r"dismiss", re.IGNORECASE),
)

COMPLETION_AFFORDANCES = (VIEW_DETAILS, STRUCTURED_DATA)


@dataclass(frozen=True)
class Observation:
    """Point-in-time snapshot of the page's visible condition."""
    text: str
    error: bool
    processing: bool
    complete: bool

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        processing: bool = False,
        affordance: bool = False,
    ) -> "Observation":
        return cls(
            text=text,
            error=has_error_text(text),
            processing=processing,
            complete=affordance or has_complete_text(text),
        )


def has_error_text(text: str) -> bool:
    return ERROR_TEXT.search(text or "") is not None


def has_complete_text(text: str) -> bool:
    return COMPLETE_TEXT.search(text or "") is not None


def classify(observation: Observation) -> Signal:
    """
    Map an observation to a single signal.

    Priority: error modal, then processing indicator, then any completion
    signal. Anything else is indeterminate.
    """
    if observation.error:
        return Signal.ERROR
    if observation.processing:
        return Signal.PROCESSING
    if observation.complete:
        return Signal.COMPLETE
    return Signal.INDETERMINATE


def classify_progress(observation: Observation) -> Signal:
    """
    Map an observation taken while waiting for results.

    Error text is ignored here: the analysed page or a result card can contain
    the same phrase, so only the processing indicator and the completion
    signals count. Never returns ``Signal.ERROR``.
    """
    if observation.processing:
        return Signal.PROCESSING
    if observation.complete:
        return Signal.COMPLETE
    return Signal.INDETERMINATE


async def observe_page(driver: "PageDriver") -> Observation:
    """Query the driver once and build a fresh observation."""
    text = await driver.observe()
    processing = await driver.has_element(PROCESSING_INDICATOR)
    affordance = False
    for query in COMPLETION_AFFORDANCES:
        if await driver.has_element(query):
            affordance = True
            break
    return Observation.from_text(text, processing=processing, affordance=affordance)
