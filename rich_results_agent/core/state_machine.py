"""
Completion poller and recovery state machine.

The Rich Results Test never announces that it is done. The machine submits
the URL, recovers from the tool's transient "Something went wrong" modal,
and then watches the rendered page until a completion signal shows up or the
task deadline passes.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from ..error_handling import FailureReason
from ..utils.message_types import MessageType
from ..utils.notification import NotificationManager
from .page_driver import PageDriver
from .poller import PollStatus, poll_until
from .signals import DISMISS_CONTROL, Signal, classify, classify_progress, observe_page

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    SUBMITTED = "SUBMITTED"
    ERROR_RECOVERY = "ERROR_RECOVERY"
    WAITING = "WAITING"
    INDETERMINATE = "INDETERMINATE"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETE, TaskState.FAILED)


_PENDING = (TaskState.WAITING, TaskState.INDETERMINATE)


def transition(
    state: TaskState,
    signal: Signal,
    *,
    recovery_attempt: int = 0,
    max_recovery_attempts: int = 5,
) -> TaskState:
    """
    Next state for one observation.

    Depends only on the current state, the observed signal and the recovery
    counter. Deadline expiry is handled by the poller.
    """
    if state.is_terminal:
        return state

    if state is TaskState.SUBMITTED:
        return TaskState.ERROR_RECOVERY if signal is Signal.ERROR else TaskState.WAITING

    if state is TaskState.ERROR_RECOVERY:
        if signal is not Signal.ERROR:
            return TaskState.WAITING
        if recovery_attempt >= max_recovery_attempts:
            return TaskState.FAILED
        return TaskState.ERROR_RECOVERY

    # WAITING / INDETERMINATE
    if signal is Signal.PROCESSING:
        return TaskState.WAITING
    if signal is Signal.COMPLETE:
        return TaskState.COMPLETE
    return TaskState.INDETERMINATE


@dataclass
class Task:
    """The single unit of work in flight for one ``run`` call."""
    url: str
    started_at: float
    deadline: float
    max_recovery_attempts: int
    state: TaskState = TaskState.SUBMITTED
    recovery_attempts: int = 0
    observations: int = 0
    history: List[TaskState] = field(default_factory=lambda: [TaskState.SUBMITTED])


@dataclass
class TaskOutcome:
    """Terminal result of a task."""
    state: TaskState
    reason: Optional[FailureReason] = None
    detail: str = ""
    history: List[TaskState] = field(default_factory=list)
    recovery_attempts: int = 0
    observations: int = 0
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.state is TaskState.COMPLETE

    def raise_for_failure(self) -> None:
        """Raise the exception matching ``reason`` when the task failed."""
        if self.reason is not None:
            raise self.reason.exception_type(self.detail)


REMOTE_ERROR_DETAIL = "repeated transient error after exhausting recovery attempts"
DEADLINE_DETAIL = "timed out waiting for completion"
MISSING_INPUT_DETAIL = "input URL is required"


class CompletionStateMachine:
    """
    Drives submit -> error recovery -> completion wait on a single page.

    Time is read through ``clock`` and every wait goes through ``sleep`` so
    the whole machine can run against a fake page and a fake clock.
    """

    def __init__(
        self,
        driver: PageDriver,
        *,
        poll_interval: float = 1.0,
        submit_settle: float = 3.0,
        recovery_settle: float = 3.0,
        dismiss_settle: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        notifier: Optional[NotificationManager] = None,
    ):
        self.driver = driver
        self.poll_interval = poll_interval
        self.submit_settle = submit_settle
        self.recovery_settle = recovery_settle
        self.dismiss_settle = dismiss_settle
        self.clock = clock
        self.sleep = sleep
        self.notifier = notifier or NotificationManager()

    async def run(
        self,
        url: str,
        timeout: float = 60.0,
        max_recovery_attempts: int = 5,
    ) -> TaskOutcome:
        """
        Submit ``url`` and wait for the remote analysis to finish.

        Args:
            url: URL to analyse
            timeout: Seconds from now until the task is abandoned
            max_recovery_attempts: Dismiss-and-resubmit cycles allowed while
                the error modal keeps showing

        Returns:
            TaskOutcome in COMPLETE or FAILED state
        """
        if not url or not url.strip():
            logger.error("Refusing to start: no input URL")
            return TaskOutcome(
                state=TaskState.FAILED,
                reason=FailureReason.PRECONDITION_MISSING,
                detail=MISSING_INPUT_DETAIL,
            )
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        if max_recovery_attempts < 0:
            raise ValueError(f"max_recovery_attempts must be >= 0, got {max_recovery_attempts}")

        started = self.clock()
        task = Task(
            url=url,
            started_at=started,
            deadline=started + timeout,
            max_recovery_attempts=max_recovery_attempts,
        )

        await self.driver.submit_input(url)
        await self._pause(task, self.submit_settle)

        recovery = await poll_until(
            lambda: observe_page(self.driver),
            lambda observation: self._advance(task, classify(observation)),
            lambda state: state is not TaskState.ERROR_RECOVERY,
            interval=self.recovery_settle,
            deadline=task.deadline,
            max_ticks=max_recovery_attempts,
            between=lambda attempt: self._recover(task, attempt),
            clock=self.clock,
            sleep=self.sleep,
        )
        if recovery.status is PollStatus.EXPIRED:
            return self._finish(task, FailureReason.DEADLINE_EXCEEDED, DEADLINE_DETAIL)
        if task.state is not TaskState.WAITING:
            # FAILED, or still erroring with no recovery attempts allowed
            return self._finish(task, FailureReason.REMOTE_TRANSIENT_ERROR, REMOTE_ERROR_DETAIL)

        completion = await poll_until(
            lambda: observe_page(self.driver),
            lambda observation: self._advance(task, classify_progress(observation)),
            lambda state: state.is_terminal,
            interval=self.poll_interval,
            deadline=task.deadline,
            clock=self.clock,
            sleep=self.sleep,
        )
        if completion.status is PollStatus.SATISFIED:
            return self._finish(task)
        return self._finish(task, FailureReason.DEADLINE_EXCEEDED, DEADLINE_DETAIL)

    def _advance(self, task: Task, signal: Signal) -> TaskState:
        task.observations += 1
        new_state = transition(
            task.state,
            signal,
            recovery_attempt=task.recovery_attempts,
            max_recovery_attempts=task.max_recovery_attempts,
        )
        logger.debug(f"Observation {task.observations}: {signal.value} -> {new_state.value}")
        if new_state is not task.state:
            self._enter(task, new_state)
        return new_state

    def _enter(self, task: Task, state: TaskState) -> None:
        logger.info(f"{task.state.value} -> {state.value}")
        self.notifier.notify(f"{task.state.value} -> {state.value}", MessageType.STATE_CHANGE.value)
        task.state = state
        task.history.append(state)

    async def _recover(self, task: Task, attempt: int) -> None:
        task.recovery_attempts = attempt
        logger.warning(
            f"'Something went wrong' detected. Attempt {attempt}/{task.max_recovery_attempts}..."
        )
        self.notifier.notify(
            f"Recovery attempt {attempt}/{task.max_recovery_attempts}",
            MessageType.RECOVERY.value,
        )

        if await self.driver.activate_control(DISMISS_CONTROL):
            await self._pause(task, self.dismiss_settle)

        await self.driver.confirm_input()
        logger.info("Retrying test by confirming the URL input again")

    async def _pause(self, task: Task, seconds: float) -> None:
        remaining = task.deadline - self.clock()
        await self.sleep(max(0.0, min(seconds, remaining)))

    def _finish(
        self,
        task: Task,
        reason: Optional[FailureReason] = None,
        detail: str = "",
    ) -> TaskOutcome:
        if reason is not None and task.state is not TaskState.FAILED:
            self._enter(task, TaskState.FAILED)

        elapsed = self.clock() - task.started_at
        if reason is None:
            logger.info(f"Task complete after {elapsed:.1f}s ({task.observations} observations)")
            self.notifier.notify("Task complete", MessageType.SUCCESS.value)
        else:
            logger.error(f"Task failed: {detail}")
            self.notifier.notify(detail, MessageType.ERROR.value)

        return TaskOutcome(
            state=task.state,
            reason=reason,
            detail=detail,
            history=list(task.history),
            recovery_attempts=task.recovery_attempts,
            observations=task.observations,
            elapsed=elapsed,
        )
