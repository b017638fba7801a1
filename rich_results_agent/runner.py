"""
End-to-end Rich Results workflow: open the tool, submit a URL, wait for the
analysis and capture the requested region of the result page.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncContextManager, Awaitable, Callable, Optional

from .config import AgentConfig, load_config
from .core.browser_session import BrowserSession
from .core.page_driver import ClipRegion, PlaywrightPageDriver
from .core.state_machine import CompletionStateMachine, TaskOutcome
from .error_handling import PreconditionMissing, retry_operation
from .utils.message_types import MessageType
from .utils.notification import NotificationManager

logger = logging.getLogger(__name__)

SessionFactory = Callable[[AgentConfig], AsyncContextManager[Any]]
DriverFactory = Callable[[Any, AgentConfig], PlaywrightPageDriver]


@dataclass
class CaptureResult:
    path: Path
    region: ClipRegion
    outcome: TaskOutcome


def _default_session(config: AgentConfig) -> BrowserSession:
    return BrowserSession(config.browser, default_timeout=config.timeout)


def _default_driver(session: BrowserSession, config: AgentConfig) -> PlaywrightPageDriver:
    return PlaywrightPageDriver(
        session.page,
        type_delay_ms=config.browser.type_delay_ms,
        mouse_steps=config.browser.mouse_steps,
        mouse_pause_ms=config.browser.mouse_pause_ms,
    )


async def run_rich_results_test(
    url: Optional[str],
    config: Optional[AgentConfig] = None,
    *,
    session_factory: SessionFactory = _default_session,
    driver_factory: DriverFactory = _default_driver,
    notifier: Optional[NotificationManager] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> CaptureResult:
    """
    Run the Rich Results Test for ``url`` and save a clipped screenshot.

    Raises:
        PreconditionMissing: ``url`` is empty; no browser is launched
        TransientOperationFailure: page load or input wait kept failing
        RemoteTransientError: the tool kept showing its error modal
        DeadlineExceeded: no completion signal before the timeout
    """
    if not url or not url.strip():
        raise PreconditionMissing("--url is required")

    config = config or load_config()
    notifier = notifier or NotificationManager()
    capture = config.capture
    region = ClipRegion(capture.x, capture.y, capture.width, capture.height)

    async with session_factory(config) as session:
        driver = driver_factory(session, config)

        await retry_operation(
            lambda: driver.navigate(config.tool_url),
            config.retries,
            config.retry_base_delay,
            sleep=sleep,
            notifier=notifier,
            name="navigate",
        )
        await retry_operation(
            driver.wait_for_input,
            config.retries,
            config.retry_base_delay,
            sleep=sleep,
            notifier=notifier,
            name="wait_for_input",
        )

        machine = CompletionStateMachine(
            driver,
            poll_interval=config.poll_interval,
            submit_settle=config.submit_settle,
            recovery_settle=config.recovery_settle,
            dismiss_settle=config.dismiss_settle,
            clock=clock,
            sleep=sleep,
            notifier=notifier,
        )
        outcome = await machine.run(url, config.timeout, config.max_recovery_attempts)
        outcome.raise_for_failure()

        if capture.draw_overlay:
            await driver.draw_overlay(region)
            await sleep(capture.overlay_settle)

        screenshot_dir = Path(capture.screenshots_dir)
        screenshot_dir.mkdir(parents=True, exist_ok=True)
        output_path = screenshot_dir / capture.output
        await driver.capture(region, output_path)

    notifier.notify(f"Screenshot saved to {output_path}", MessageType.SUCCESS.value)
    logger.info(f"✅ Screenshot saved to {output_path}")
    return CaptureResult(path=output_path, region=region, outcome=outcome)
