"""Tests for the bounded exponential-backoff retrier."""

import asyncio

import pytest

from rich_results_agent.error_handling import (
    NavigationError,
    PageLoadError,
    RetryConfig,
    retry_operation,
    with_async_retry,
)
from rich_results_agent.utils.message_types import MessageType
from rich_results_agent.utils.notification import NotificationManager


class Flaky:
    """Fails ``failures`` times, then returns ``result``."""

    def __init__(self, failures: int, result: str = "ok", error: type = PageLoadError):
        self.failures = failures
        self.result = result
        self.error = error
        self.calls = 0
        self.raised = []

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            exc = self.error(f"failure {self.calls}")
            self.raised.append(exc)
            raise exc
        return self.result


def test_returns_first_success_without_sleeping(clock) -> None:
    op = Flaky(failures=0)

    result = asyncio.run(retry_operation(op, retries=3, base_delay=1.0, sleep=clock.sleep))

    assert result == "ok"
    assert op.calls == 1
    assert clock.sleeps == []


def test_backoff_doubles_before_each_retry(clock) -> None:
    op = Flaky(failures=3)

    result = asyncio.run(retry_operation(op, retries=3, base_delay=1.0, sleep=clock.sleep))

    assert result == "ok"
    assert op.calls == 4
    assert clock.sleeps == [1.0, 2.0, 4.0]


def test_exhausted_retries_reraise_the_original_error(clock) -> None:
    op = Flaky(failures=10)

    with pytest.raises(PageLoadError) as excinfo:
        asyncio.run(retry_operation(op, retries=2, base_delay=0.5, sleep=clock.sleep))

    assert excinfo.value is op.raised[-1]
    assert op.calls == 3
    assert clock.sleeps == [0.5, 1.0]


def test_zero_retries_runs_once(clock) -> None:
    op = Flaky(failures=1)

    with pytest.raises(PageLoadError):
        asyncio.run(retry_operation(op, retries=0, base_delay=1.0, sleep=clock.sleep))

    assert op.calls == 1
    assert clock.sleeps == []


def test_unlisted_exceptions_are_not_retried(clock) -> None:
    op = Flaky(failures=1, error=KeyError)

    with pytest.raises(KeyError):
        asyncio.run(
            retry_operation(
                op, retries=3, base_delay=1.0,
                exceptions=(NavigationError,), sleep=clock.sleep,
            )
        )

    assert op.calls == 1


@pytest.mark.parametrize("retries, base_delay", [(-1, 1.0), (3, 0), (3, -2.0)])
def test_invalid_budget_is_rejected_before_running(clock, retries, base_delay) -> None:
    op = Flaky(failures=0)

    with pytest.raises(ValueError):
        asyncio.run(retry_operation(op, retries=retries, base_delay=base_delay, sleep=clock.sleep))

    assert op.calls == 0


def test_retry_config_delay_law() -> None:
    config = RetryConfig(max_retries=5, base_delay=0.25)

    delays = [config.get_delay(k) for k in range(1, 6)]

    assert delays == [0.25 * 2 ** (k - 1) for k in range(1, 6)]
    assert delays == sorted(delays)


def test_retries_are_reported_as_progress_events(clock) -> None:
    events = []
    notifier = NotificationManager()
    notifier.register_listener(events.append)

    asyncio.run(
        retry_operation(
            Flaky(failures=2), retries=3, base_delay=1.0,
            sleep=clock.sleep, notifier=notifier, name="navigate",
        )
    )

    assert [e["type"] for e in events] == [MessageType.RETRY.value] * 2
    assert events[0]["message"].startswith("navigate retry 1/3")


def test_decorator_retries_listed_failures() -> None:
    calls = []

    @with_async_retry(RetryConfig(max_retries=2, base_delay=0.001))
    async def load(url: str) -> str:
        calls.append(url)
        if len(calls) < 2:
            raise NavigationError("net::ERR_CONNECTION_RESET")
        return url

    assert asyncio.run(load("https://example.com")) == "https://example.com"
    assert calls == ["https://example.com"] * 2
    assert load.__name__ == "load"
