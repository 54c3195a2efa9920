# src/gridtick/core/timing.py

"""Clock, timer and time-formatting helpers (all times are integer milliseconds)."""

from __future__ import annotations

import asyncio
import math
import time
from datetime import datetime, timedelta
from typing import Callable

MS_PER_SECOND = 1000


def system_clock() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def to_millis(value: int | float | timedelta) -> int:
    """
    Convert a duration (ms number or timedelta) into integer milliseconds.

    Fractional or non-finite values raise ValueError instead of being truncated.
    """
    if isinstance(value, timedelta):
        value = value / timedelta(milliseconds=1)
    if isinstance(value, bool):
        raise TypeError("duration must be a number of milliseconds or a timedelta")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"duration must be finite, got {value!r}")
        if not value.is_integer():
            raise ValueError(f"duration must be a whole number of milliseconds, got {value!r}")
    return int(value)


def format_time(ms: int) -> str:
    """Human-readable local time of day, e.g. '14:05:00'."""
    return datetime.fromtimestamp(ms / MS_PER_SECOND).strftime("%H:%M:%S")


class LoopTimer:
    """
    Timer backed by the running asyncio loop.

    The loop is resolved lazily so the timer can be created before asyncio.run().
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0, delay) / MS_PER_SECOND, callback)
