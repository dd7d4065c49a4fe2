"""APScheduler based ticker."""

import logging
from collections.abc import Callable

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from hilal.services.ports import TickerPort

logger = logging.getLogger(__name__)

TICK_JOB_ID = "hilal_tick"


class APSchedulerTicker(TickerPort):
    """Runs the tick callback as a one-second interval job.

    ``max_instances=1`` keeps ticks from overlapping and ``coalesce`` folds
    ticks missed during a suspend into a single run. The job is a coroutine,
    so ``AsyncIOScheduler`` runs the callback on the event loop thread
    instead of its thread pool.
    """

    def __init__(self, scheduler: BaseScheduler | None = None) -> None:
        self._scheduler = scheduler or AsyncIOScheduler(jobstores={"default": MemoryJobStore()})
        self._callback: Callable[[], None] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, callback: Callable[[], None], interval_seconds: float = 1.0) -> None:
        """Start the interval job, starting APScheduler itself if needed."""
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("APScheduler started.")

        self._callback = callback
        self._scheduler.add_job(
            self._run_callback,
            trigger=IntervalTrigger(seconds=interval_seconds),
            id=TICK_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
        )
        self._running = True
        logger.debug(f"Tick job scheduled every {interval_seconds}s")

    async def _run_callback(self) -> None:
        if self._callback is not None:
            self._callback()

    def stop(self) -> None:
        """Remove the tick job; APScheduler keeps running until shutdown."""
        if self._scheduler.get_job(TICK_JOB_ID) is not None:
            self._scheduler.remove_job(TICK_JOB_ID)
        self._running = False

    def shutdown(self) -> None:
        """Stop the job and APScheduler."""
        self.stop()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("APScheduler shut down.")
