"""
Generic "poll until predicate, tick budget or deadline" primitive.

Both the error-recovery loop and the completion wait are expressed with
:func:`poll_until`; only the probe, the classifier and the exit predicate
differ between them.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

P = TypeVar("P")
V = TypeVar("V")


class PollStatus(Enum):
    SATISFIED = "satisfied"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"


@dataclass
class PollResult(Generic[V]):
    status: PollStatus
    value: Optional[V]
    ticks: int

    @property
    def satisfied(self) -> bool:
        return self.status is PollStatus.SATISFIED


async def poll_until(
    probe: Callable[[], Awaitable[P]],
    classify: Callable[[P], V],
    until: Callable[[V], bool],
    *,
    interval: float,
    deadline: Optional[float] = None,
    max_ticks: Optional[int] = None,
    between: Optional[Callable[[int], Awaitable[Any]]] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> PollResult[V]:
    """
    Probe, classify and test until ``until`` accepts the classified value.

    Tick 0 probes immediately. After every rejected value the loop stops with
    ``EXHAUSTED`` once ``max_ticks`` follow-up ticks have run, or with
    ``EXPIRED`` once ``clock()`` has reached ``deadline``. Otherwise it advances
    the tick, awaits ``between(tick)`` when given, and sleeps ``interval``
    seconds (never past the deadline) before probing again.

    No probe is taken once the deadline has been reached, so ``value`` of an
    ``EXPIRED`` result is the last value seen before it (``None`` if none).
    """
    if interval < 0:
        raise ValueError(f"interval must be >= 0, got {interval}")

    tick = 0
    value: Optional[V] = None
    while True:
        if deadline is not None and clock() >= deadline:
            return PollResult(PollStatus.EXPIRED, value, tick)
        value = classify(await probe())
        if until(value):
            return PollResult(PollStatus.SATISFIED, value, tick)
        if max_ticks is not None and tick >= max_ticks:
            return PollResult(PollStatus.EXHAUSTED, value, tick)
        if deadline is not None and clock() >= deadline:
            return PollResult(PollStatus.EXPIRED, value, tick)

        tick += 1
        if between is not None:
            await between(tick)

        delay = interval
        if deadline is not None:
            delay = max(0.0, min(delay, deadline - clock()))
        await sleep(delay)
