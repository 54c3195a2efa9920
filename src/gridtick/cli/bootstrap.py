# src/gridtick/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the tasks and wires them into a Scheduler.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..tasks.task_api import HeartbeatTask
from ..tasks.task_models import Task
from ..tasks.task_scheduler import Scheduler

logger = logging.getLogger(__name__)


def build_tasks(settings: Settings) -> list[Task]:
    """One heartbeat task per configured name, all on the same grid."""
    return [
        HeartbeatTask(
            interval=settings.heartbeat_interval_ms,
            offset=settings.heartbeat_offset_ms,
            name=name,
        )
        for name in settings.heartbeat_names
    ]


def create_scheduler(*, settings: Settings | None = None) -> Scheduler:
    """
    Create a Scheduler from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    tasks = build_tasks(settings)
    logger.info("Built %d task(s): %s", len(tasks), ", ".join(t.name for t in tasks))
    return Scheduler(tasks, log=settings.scheduler_log)
