# tests/test_task_api.py

from __future__ import annotations

import logging
from datetime import timedelta

import pytest

from gridtick.tasks.task_api import CallbackTask, HeartbeatTask, periodic
from gridtick.tasks.task_models import TaskConfigError


@pytest.mark.asyncio
async def test_callback_task_runs_sync_callable() -> None:
    seen: list[tuple[int, int]] = []

    def purge_tmp(now: int, time: int) -> None:
        seen.append((now, time))

    task = CallbackTask(purge_tmp, interval=1000)
    await task.perform(1003, 1000)

    assert seen == [(1003, 1000)]
    assert task.name == "purge_tmp"


@pytest.mark.asyncio
async def test_callback_task_awaits_async_callable() -> None:
    seen: list[int] = []

    async def flush_metrics(now: int, time: int) -> None:
        seen.append(time)

    task = CallbackTask(flush_metrics, interval=500, name="metrics")
    await task.perform(500, 500)

    assert seen == [500]
    assert task.name == "metrics"


def test_periodic_builds_a_callback_task() -> None:
    task = periodic(lambda now, time: None, interval=timedelta(minutes=1), offset=15_000, name="poll")

    assert isinstance(task, CallbackTask)
    assert task.interval == 60_000
    assert task.offset == 15_000
    assert task.schedule(0) == 15_000


def test_periodic_validates_interval() -> None:
    with pytest.raises(TaskConfigError):
        periodic(lambda now, time: None, interval=0)


@pytest.mark.asyncio
async def test_heartbeat_logs_tick_index(caplog) -> None:
    task = HeartbeatTask(interval=1000, name="beat")

    with caplog.at_level(logging.INFO, logger="gridtick"):
        await task.perform(3050, 3000)

    assert "beat heartbeat #3 (lag 50 ms)" in caplog.text
