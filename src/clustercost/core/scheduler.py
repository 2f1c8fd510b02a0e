import asyncio
import logging
import re
from typing import Callable, Coroutine, List

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Manages the scheduling and execution of periodic async jobs using asyncio.

    A job runs once immediately, then again after every interval. Exceptions
    raised by a job are logged and never stop its loop.
    """

    def __init__(self):
        self.tasks: List[asyncio.Task] = []
        self._stopping = asyncio.Event()
        logger.debug("Scheduler initialized.")

    async def _run_periodically(self, interval_seconds: float, job_func: Callable[[], Coroutine]):
        """Internal loop to run a job periodically."""
        try:
            while True:
                try:
                    await job_func()
                except Exception as e:
                    logger.error(f"Error in scheduled job '{_job_name(job_func)}': {e}", exc_info=True)

                if await self._wait_for_stop(interval_seconds):
                    logger.info(f"Job '{_job_name(job_func)}' stopped.")
                    return
        except asyncio.CancelledError:
            logger.info(f"Job '{_job_name(job_func)}' cancelled.")
            raise

    def add_job(self, job_func: Callable[[], Coroutine], interval_seconds: float) -> asyncio.Task:
        """
        Adds a new async job to the schedule.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        task = asyncio.create_task(self._run_periodically(interval_seconds, job_func))
        self.tasks.append(task)
        logger.info(f"Scheduled job '{_job_name(job_func)}' to run every {interval_seconds}s.")
        return task

    async def _wait_for_stop(self, interval_seconds: float) -> bool:
        """Sleeps for the interval; True if stop() was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stopping.wait(), interval_seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def stop(self, grace_period: float = 0):
        """
        Stops all scheduled jobs. With a grace period, a job that is mid-run
        gets that long to finish its current iteration before being cancelled.
        """
        logger.info("Stopping scheduler...")
        self._stopping.set()
        if self.tasks and grace_period > 0:
            await asyncio.wait(self.tasks, timeout=grace_period)
        for task in self.tasks:
            task.cancel()
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()


def parse_interval(interval_str: str) -> int:
    """Converts '30s', '5m' or '1h' to seconds."""
    match = re.match(r"^(\d+)([smh])$", interval_str.strip().lower())
    if not match:
        raise ValueError(f"Invalid interval format: '{interval_str}'. Use 's', 'm', or 'h'.")
    value, unit = int(match.group(1)), match.group(2)
    multipliers = {"s": 1, "m": 60, "h": 3600}
    return value * multipliers[unit]


def _job_name(job_func) -> str:
    return getattr(job_func, "__name__", repr(job_func))
