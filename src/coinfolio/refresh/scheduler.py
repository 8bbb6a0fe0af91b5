"""Periodic refresh scheduler.

Owns at most one background asyncio task. The task sleeps for the refresh
interval, then awaits the refresh action, and repeats until stopped.

State machine:
    IDLE --start()--> RUNNING
    RUNNING --start()--> RUNNING   (old trigger cancelled first)
    RUNNING --stop()--> IDLE
    IDLE --stop()--> IDLE          (no-op)

A failing refresh is logged and retried on the next tick at the same
interval; the scheduler stays RUNNING. Overlapping start()/stop() calls
are serialized, so there is never more than one live trigger.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

from coinfolio.logging import get_logger, refresh_cycle_context

logger = get_logger(__name__)

RefreshAction = Callable[[], Awaitable[None]]
SleepFunc = Callable[[float], Awaitable[None]]


class SchedulerState(str, Enum):
    """Refresh scheduler lifecycle state."""

    IDLE = "idle"
    RUNNING = "running"


class RefreshScheduler:
    """Fires a refresh action on a fixed interval.

    Args:
        action: Coroutine function invoked on every tick.
        interval: Seconds between ticks.
        sleep: Sleep primitive; tests pass a simulated clock here.
    """

    def __init__(
        self,
        action: RefreshAction,
        interval: float = 60.0,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._action = action
        self._interval = interval
        self._sleep = sleep
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]
        # start/stop await the old task; overlapping calls must not interleave.
        self._lifecycle_lock = asyncio.Lock()
        self._cycle = 0
        self._refresh_count = 0
        self._failure_count = 0

    @property
    def state(self) -> SchedulerState:
        if self._task is not None and not self._task.done():
            return SchedulerState.RUNNING
        return SchedulerState.IDLE

    @property
    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def refresh_count(self) -> int:
        """Number of refresh actions that completed without raising."""
        return self._refresh_count

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def start(self) -> None:
        """Start the periodic trigger, replacing any trigger already running."""
        async with self._lifecycle_lock:
            if self._task is not None:
                logger.info("refresh_scheduler_restarting")
                await self._cancel_task()
            self._task = asyncio.create_task(self._run_loop())
        logger.info("refresh_scheduler_started", interval=self._interval)

    async def stop(self) -> None:
        """Cancel the periodic trigger. Does nothing when already idle."""
        async with self._lifecycle_lock:
            if self._task is None:
                return
            await self._cancel_task()
        logger.info("refresh_scheduler_stopped", refresh_count=self._refresh_count)

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run_loop(self) -> None:
        while True:
            await self._sleep(self._interval)
            await self._fire()

    async def _fire(self) -> None:
        self._cycle += 1
        try:
            with refresh_cycle_context(self._cycle):
                await self._action()
        except asyncio.CancelledError:
            raise
        except Exception:
            self._failure_count += 1
            logger.warning(
                "refresh_failed",
                refresh_cycle=self._cycle,
                failure_count=self._failure_count,
                retry_in=self._interval,
                exc_info=True,
            )
            return
        self._refresh_count += 1
        logger.debug("refresh_completed", refresh_count=self._refresh_count)

    def get_status(self) -> dict:
        return {
            "state": self.state.value,
            "interval_seconds": self._interval,
            "refresh_count": self._refresh_count,
            "failure_count": self._failure_count,
        }
