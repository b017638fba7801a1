"""
Core components: signal detection, polling, the completion state machine
and the Playwright page driver.
"""

from .signals import Signal, Observation, ElementQuery, classify, classify_progress, observe_page
from .poller import PollResult, PollStatus, poll_until
from .state_machine import (
    CompletionStateMachine,
    Task,
    TaskOutcome,
    TaskState,
    transition,
)
from .page_driver import ClipRegion, PageDriver, PlaywrightPageDriver
from .browser_session import BrowserSession

__all__ = [
    "Signal",
    "Observation",
    "ElementQuery",
    "classify",
    "classify_progress",
    "observe_page",
    "PollResult",
    "PollStatus",
    "poll_until",
    "CompletionStateMachine",
    "Task",
    "TaskOutcome",
    "TaskState",
    "transition",
    "ClipRegion",
    "PageDriver",
    "PlaywrightPageDriver",
    "BrowserSession",
]
