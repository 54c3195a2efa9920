# src/gridtick/tasks/task_api.py

from __future__ import annotations

import inspect
import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable

from .task_models import DEFAULT_INTERVAL_MS, Task

logger = logging.getLogger(__name__)

TaskFunc = Callable[[int, int], Awaitable[Any] | Any]


class CallbackTask(Task):
    """
    Task whose work is a plain callable.

    func receives (now, time) and may be sync or async.
    """

    def __init__(
        self,
        func: TaskFunc,
        *,
        interval: int | timedelta = DEFAULT_INTERVAL_MS,
        name: str | None = None,
        offset: int | timedelta = 0,
    ) -> None:
        super().__init__(
            interval=interval,
            name=name or getattr(func, "__name__", None),
            offset=offset,
        )
        self._func = func

    async def perform(self, now: int, time: int) -> None:
        result = self._func(now, time)
        if inspect.isawaitable(result):
            await result


class HeartbeatTask(Task):
    """Logs a line on every tick. Handy to check a process is alive."""

    async def perform(self, now: int, time: int) -> None:
        lag = now - time
        logger.info("%s heartbeat #%d (lag %d ms)", self.name, self.schedule_index(time), lag)


def periodic(
    func: TaskFunc,
    *,
    interval: int | timedelta = DEFAULT_INTERVAL_MS,
    offset: int | timedelta = 0,
    name: str | None = None,
) -> CallbackTask:
    """
    Convenience helper: wrap a callable into a schedulable task.

        scheduler = Scheduler([periodic(flush_metrics, interval=timedelta(minutes=1))])
    """
    return CallbackTask(func, interval=interval, name=name, offset=offset)
