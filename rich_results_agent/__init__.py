"""
Rich Results Agent - automates Google's Rich Results Test.

This package provides:
- Bounded exponential-backoff retries for flaky browser steps
- A completion/recovery state machine that watches the rendered page
- A Playwright driver and an end-to-end capture workflow

Example usage:
    from rich_results_agent import run_rich_results_test, load_config

    config = load_config(capture={"output": "example.png"})
    result = await run_rich_results_test("https://example.com", config)
"""

# Workflow
from .runner import run_rich_results_test, CaptureResult

# Core components
from .core import (
    BrowserSession,
    ClipRegion,
    CompletionStateMachine,
    PageDriver,
    PlaywrightPageDriver,
    Signal,
    TaskOutcome,
    TaskState,
)

# Configuration
from .config import AgentConfig, BrowserConfig, CaptureConfig, load_config

# Error handling
from .error_handling import (
    RichResultsError,
    TransientOperationFailure,
    BrowserConnectionError,
    PageLoadError,
    NavigationError,
    ElementNotFoundError,
    RemoteTransientError,
    DeadlineExceeded,
    PreconditionMissing,
    FailureReason,
    RetryConfig,
    retry_operation,
    with_async_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Workflow
    "run_rich_results_test",
    "CaptureResult",

    # Core classes
    "BrowserSession",
    "ClipRegion",
    "CompletionStateMachine",
    "PageDriver",
    "PlaywrightPageDriver",
    "Signal",
    "TaskOutcome",
    "TaskState",

    # Configuration
    "AgentConfig",
    "BrowserConfig",
    "CaptureConfig",
    "load_config",

    # Exceptions
    "RichResultsError",
    "TransientOperationFailure",
    "BrowserConnectionError",
    "PageLoadError",
    "NavigationError",
    "ElementNotFoundError",
    "RemoteTransientError",
    "DeadlineExceeded",
    "PreconditionMissing",
    "FailureReason",

    # Utilities
    "RetryConfig",
    "retry_operation",
    "with_async_retry",
]
