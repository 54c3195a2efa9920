# src/gridtick/tasks/task_models.py

from __future__ import annotations

from datetime import timedelta
from typing import NamedTuple

from ..core.ports import PeriodicTask
from ..core.timing import to_millis

DEFAULT_INTERVAL_MS = 3_600_000  # 1 hour


class TaskConfigError(ValueError):
    """Raised when a task is constructed with an unusable schedule."""


class Task:
    """
    A task that can be scheduled.

    Ticks fall on a fixed grid: every `interval` milliseconds, shifted by
    `offset`. Subclasses override perform(); schedule() and schedule_index()
    are pure and safe to call from anywhere.
    """

    def __init__(
        self,
        *,
        interval: int | timedelta = DEFAULT_INTERVAL_MS,
        name: str | None = None,
        offset: int | timedelta = 0,
    ) -> None:
        try:
            interval_ms = to_millis(interval)
            offset_ms = to_millis(offset)
        except (TypeError, ValueError) as e:
            raise TaskConfigError(f"invalid interval/offset: {e}") from e

        if interval_ms <= 0:
            raise TaskConfigError(f"interval must be positive, got {interval!r}")

        self._interval = interval_ms
        self._offset = offset_ms
        self.name = name or type(self).__name__

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def offset(self) -> int:
        return self._offset

    def schedule(self, now: int) -> int:
        """
        Next grid boundary strictly after `now`.

        A `now` exactly on the grid maps to the following boundary, so the
        result is always greater than `now`.
        """
        elapsed = (now - self._offset) % self._interval
        return now + (self._interval - elapsed)

    def schedule_index(self, time: int) -> int:
        """Ordinal tick number of a scheduled time."""
        return (time - self._offset) // self._interval

    async def perform(self, now: int, time: int) -> None:
        """Run one tick. `now` is when the drain started, `time` the tick's scheduled time."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, interval={self._interval}, offset={self._offset})"


class ScheduleEntry(NamedTuple):
    """
    Heap item. Tuple order gives (time, index) ordering; index is unique per
    scheduler so `task` is never compared.
    """

    time: int
    index: int
    task: PeriodicTask
