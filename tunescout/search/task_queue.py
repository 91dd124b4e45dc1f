"""Bounded-concurrency task queue that reports every task's outcome."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from tunescout import logger

_T = TypeVar("_T")


@dataclass(frozen=True)
class Fulfilled(Generic[_T]):
    """Task finished and produced ``value``."""

    value: _T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Task raised ``error``."""

    error: Exception

    @property
    def ok(self) -> bool:
        return False


TaskOutcome = Union[Fulfilled[_T], Rejected]


class TaskQueue(Generic[_T]):
    """
    Run ``worker`` calls with at most ``concurrency`` in flight.

    Every batch pushed shares the same slots, so concurrency is capped across
    all callers of one queue. Waiting tasks are admitted in arrival order.
    """

    def __init__(self, name: str, concurrency: int, worker: Callable[..., Awaitable[_T]]):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.name = name
        self.concurrency = concurrency
        self._worker = worker
        self._slots: Optional[asyncio.Semaphore] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._active = 0
        self._pending = 0

    @property
    def active(self) -> int:
        return self._active

    @property
    def pending(self) -> int:
        return self._pending

    def _ensure_slots(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._slots is None or self._loop is not loop:
            self._slots = asyncio.Semaphore(self.concurrency)
            self._loop = loop
        return self._slots

    async def push(self, batch: Sequence[Sequence[Any]]) -> list[TaskOutcome[_T]]:
        """Run each argument tuple in ``batch``; outcomes come back in submission order."""
        slots = self._ensure_slots()
        outcomes = await asyncio.gather(*(self._run(slots, tuple(args)) for args in batch))
        rejected = sum(1 for outcome in outcomes if isinstance(outcome, Rejected))
        logger.get_logger().queue_settled(self.name, len(outcomes) - rejected, rejected)
        return list(outcomes)

    async def _run(self, slots: asyncio.Semaphore, args: tuple) -> TaskOutcome[_T]:
        self._pending += 1
        async with slots:
            self._pending -= 1
            self._active += 1
            try:
                return Fulfilled(await self._worker(*args))
            except Exception as exc:
                logger.get_logger().debug(f"{self.name}: task failed: {type(exc).__name__}: {exc}")
                return Rejected(exc)
            finally:
                self._active -= 1
