# src/gridtick/tasks/task_scheduler.py

from __future__ import annotations

"""
Task scheduler.

A priority-queue driven loop that:
- computes the first grid time of every task on start(),
- keeps exactly one heap entry per task, ordered by (time, index),
- arms a single one-shot timer for the earliest entry,
- when it fires, performs every due task in order, rescheduling each one
  from its previous scheduled time (never from the wall clock),
- re-arms the timer once the earliest entry is in the future.

A task that fell behind by several intervals performs once per missed tick
until it catches up (catch-up burst). Task failures are logged and the task
is rescheduled as usual.
"""

import asyncio
import functools
import heapq
import inspect
import logging
from typing import Iterable

from ..core.ports import Clock, PeriodicTask, Timer, TimerHandle
from ..core.timing import LoopTimer, format_time, system_clock
from .task_models import ScheduleEntry

logger = logging.getLogger(__name__)


class SchedulerError(RuntimeError):
    """Raised when the scheduler's own invariants cannot be met."""


class Scheduler:
    """
    Runs a fixed set of periodic tasks on one asyncio loop.

    perform() calls never overlap: due tasks are awaited one after another,
    so a slow task delays the others.
    """

    def __init__(
        self,
        tasks: Iterable[PeriodicTask] = (),
        *,
        log: bool = False,
        clock: Clock | None = None,
        timer: Timer | None = None,
    ) -> None:
        self.tasks: tuple[PeriodicTask, ...] = tuple(tasks)
        self._log = bool(log)
        self._clock: Clock = clock or system_clock
        self._timer_source: Timer = timer or LoopTimer()

        self._queue: list[ScheduleEntry] = []
        self._running = False
        self._timer: TimerHandle | None = None
        self._drain: asyncio.Task[None] | None = None
        # Bumped by stop(); a drain from an older run must not touch the queue.
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def next_entry(self) -> ScheduleEntry | None:
        """Earliest queued entry, or None when stopped."""
        return self._queue[0] if self._queue else None

    def entries(self) -> list[ScheduleEntry]:
        """Queued entries in execution order (a copy)."""
        return sorted(self._queue)

    # ---- lifecycle ----

    def start(self) -> None:
        """Schedule every task from the current time and arm the timer. No-op if running."""
        if self._running:
            return

        if not self.tasks:
            raise SchedulerError("cannot start a scheduler without tasks")

        self._running = True

        if self._log:
            logger.info("Starting task scheduler (%d tasks).", len(self.tasks))

        now = self._clock()
        for index, task in enumerate(self.tasks):
            self._schedule(task, index, task.schedule(now))

        self._set_timer()

    def stop(self) -> None:
        """
        Cancel the timer and drop the schedule. No-op if not running.

        Does not wait for a perform() already in flight; use shutdown() for that.
        """
        if not self._running:
            return

        if self._log:
            logger.info("Stopping task scheduler.")

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        self._queue.clear()
        self._running = False
        self._generation += 1

    async def join(self) -> None:
        """Wait for the in-flight drain cycle (if any) to finish."""
        drain = self._drain
        if drain is not None and not drain.done():
            await asyncio.wait({drain})

    async def shutdown(self) -> None:
        """stop() and then wait for in-flight work."""
        self.stop()
        await self.join()

    # ---- internals ----

    def _schedule(self, task: PeriodicTask, index: int, time: int) -> None:
        heapq.heappush(self._queue, ScheduleEntry(time, index, task))

        if self._log:
            logger.info("Task '%s' scheduled for %s.", task.name, format_time(time))

    def _set_timer(self) -> None:
        if not self._queue:
            raise SchedulerError("cannot arm timer: task queue is empty")

        time = self._queue[0].time
        delay = max(0, time - self._clock())
        self._timer = self._timer_source.call_later(delay, functools.partial(self._on_timer, time))

    def _on_timer(self, time: int) -> None:
        self._timer = None
        if not self._running:
            return

        # Timers may fire marginally early; the entry we armed for is due regardless.
        now = max(self._clock(), time)

        previous = self._drain
        drain = asyncio.get_running_loop().create_task(self._perform(now, self._generation, previous))
        drain.add_done_callback(self._on_drain_done)
        self._drain = drain

    def _on_drain_done(self, drain: asyncio.Task[None]) -> None:
        current = self._drain is drain
        if current:
            self._drain = None

        if drain.cancelled():
            # No timer is armed while draining, so a cancelled drain leaves nothing to fire.
            if current and self._running:
                logger.warning("Scheduler drain cancelled; stopping.")
                self.stop()
            return

        exc = drain.exception()
        if exc is not None:
            logger.error("Scheduler drain crashed.", exc_info=exc)
            if current:
                self.stop()

    async def _perform(
        self,
        now: int,
        generation: int,
        previous: asyncio.Task[None] | None,
    ) -> None:
        """Perform every task due at `now`, then re-arm the timer."""
        # A drain left over from before a stop()/start() still owns the task bodies.
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
            if generation != self._generation:
                return

        while True:
            if not self._queue:
                raise SchedulerError("task queue emptied while running")

            time, index, task = self._queue[0]
            if time > now:
                break

            if self._log:
                logger.info("Performing task '%s' at %s.", task.name, format_time(time))

            try:
                result = task.perform(now, time)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Task '%s' failed (scheduled for %s).", task.name, format_time(time))

            if generation != self._generation:
                # stop() ran while the task was in flight.
                return

            time = task.schedule(time)
            heapq.heapreplace(self._queue, ScheduleEntry(time, index, task))

            if self._log:
                logger.info("Task '%s' completed and rescheduled for %s.", task.name, format_time(time))

        self._set_timer()
