# src/gridtick/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the scheduler, then runs it on an asyncio loop
until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from ..cli.bootstrap import create_scheduler
from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import Scheduler, SchedulerError

logger = logging.getLogger(__name__)


async def run(scheduler: Scheduler, stop_event: asyncio.Event) -> None:
    """Start the scheduler, wait for stop_event, then shut down cleanly."""
    scheduler.start()
    try:
        await stop_event.wait()
    finally:
        await scheduler.shutdown()


async def _main_async(scheduler: Scheduler) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform (e.g. Windows); Ctrl+C still raises KeyboardInterrupt.
            logger.debug("Signal handler for %s not installed.", sig)

    await run(scheduler, stop_event)


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, app_name=settings.app_name, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    scheduler = create_scheduler(settings=settings)
    try:
        asyncio.run(_main_async(scheduler))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    except SchedulerError:
        logger.exception("Scheduler failed to run.")
        raise SystemExit(1)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
