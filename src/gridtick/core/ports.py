# src/gridtick/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler.

The scheduler depends on Protocols instead of concrete implementations.
This keeps the clock and the timer swappable and makes testing easier:
tests drive time by hand instead of sleeping.
"""

from typing import Any, Awaitable, Callable, Protocol

Clock = Callable[[], int]
# Returns the current time in integer milliseconds.


class TimerHandle(Protocol):
    """A pending one-shot callback. asyncio.TimerHandle satisfies this."""
    def cancel(self) -> None: ...


class Timer(Protocol):
    """
    Arms one-shot callbacks.

    delay is in milliseconds and is never negative.
    """

    def call_later(self, delay: int, callback: Callable[[], None]) -> TimerHandle: ...


class PeriodicTask(Protocol):
    """
    Capability interface the scheduler needs from a task.

    - schedule(now): next time on the task's grid, strictly after now
    - schedule_index(time): ordinal tick number of a scheduled time
    - perform(now, time): the work; may return an awaitable
    """

    name: str

    def schedule(self, now: int) -> int: ...
    def schedule_index(self, time: int) -> int: ...
    def perform(self, now: int, time: int) -> Awaitable[Any] | Any: ...
