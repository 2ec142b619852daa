"""
Status Monitor.

Re-reads the dashboard on a cron schedule and reports the aggregate status
of all jobs (or of one job) to a callback.

Schedule Format:
    Standard 5-field cron, minute resolution, matched with pycron against
    local time (checked_at timestamps in results are UTC):

    ┌───────────── minute (0-59)
    │ ┌───────────── hour (0-23)
    │ │ ┌───────────── day of month (1-31)
    │ │ │ ┌───────────── month (1-12)
    │ │ │ │ ┌───────────── day of week (0-6, Sun=0)
    │ │ │ │ │
    * * * * *

Examples:
    "* * * * *"     - Every minute (default)
    "*/5 * * * *"   - Every 5 minutes
    "0 9-17 * * 1-5" - Hourly during office hours

Ticks:
    The first check runs immediately. After that the monitor wakes on every
    minute boundary and checks when the schedule matches. A tick that fires
    while the previous check is still running is dropped, so checks never
    overlap. A failed check is reported to the callback and the next tick
    runs as usual.

Usage:
    def notify(result: MonitorResult) -> None:
        print(result.status or result.error)

    monitor = Monitor(jenkins, notify, job_name="my-job", schedule="*/5 * * * *")
    await monitor.run()      # until monitor.stop()
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

import pycron

from nestor.core.exceptions import ApplicationError
from nestor.core.logging import get_logger, log_with_source
from nestor.core.utils import local_now, utc_now
from nestor.jenkins.client import Jenkins
from nestor.jenkins.models import MonitorResult
from nestor.jenkins.status import aggregate

logger = get_logger(__name__)

DEFAULT_SCHEDULE = "* * * * *"

ResultCallback = Callable[[MonitorResult], Awaitable[None] | None]


def validate_schedule(schedule: str) -> str:
    """Reject anything that is not a 5-field cron expression."""
    if len(schedule.split()) != 5:
        raise ValueError(f"Invalid schedule {schedule!r}: expected 5 cron fields")
    return schedule


def seconds_until_next_minute(now: datetime) -> float:
    """Seconds from ``now`` to the start of the next minute."""
    next_minute = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
    return (next_minute - now).total_seconds()


class Monitor:
    """
    Periodic aggregate-status check.

    Args:
        client: Jenkins client used to read the dashboard
        on_result: Called with a MonitorResult after every check (sync or async)
        job_name: Only report the status of this job
        view_name: Read the dashboard of this view instead of the whole server
        schedule: 5-field cron expression
    """

    def __init__(
        self,
        client: Jenkins,
        on_result: ResultCallback,
        job_name: str | None = None,
        view_name: str | None = None,
        schedule: str = DEFAULT_SCHEDULE,
    ) -> None:
        self.client = client
        self.on_result = on_result
        self.job_name = job_name
        self.view_name = view_name
        self.schedule = validate_schedule(schedule)
        self.skipped_ticks = 0
        self._inflight: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

    def is_due(self, moment: datetime) -> bool:
        return pycron.is_now(self.schedule, moment)

    async def check(self) -> MonitorResult:
        """Read the dashboard once and aggregate. Errors are captured, not raised."""
        try:
            jobs = await self.client.dashboard(view_name=self.view_name)
        except ApplicationError as e:
            log_with_source(logger, "monitor", "warning", "Monitor check failed", error=str(e))
            return MonitorResult(status=None, error=e, checked_at=utc_now())
        status = aggregate(jobs, job_name=self.job_name)
        log_with_source(
            logger,
            "monitor",
            "debug",
            "Monitor check completed",
            status=status.value if status else None,
            job_name=self.job_name,
        )
        return MonitorResult(status=status, error=None, checked_at=utc_now())

    async def _tick(self) -> None:
        try:
            result = await self.check()
        except Exception as e:
            log_with_source(logger, "monitor", "error", "Monitor check crashed", error=repr(e))
            result = MonitorResult(status=None, error=e, checked_at=utc_now())
        outcome = self.on_result(result)
        if inspect.isawaitable(outcome):
            await outcome

    def trigger(self) -> bool:
        """
        Start a check unless one is still running.

        Returns:
            True if a check was started, False if the tick was dropped
        """
        if self._inflight is not None and not self._inflight.done():
            self.skipped_ticks += 1
            log_with_source(
                logger,
                "monitor",
                "warning",
                "Monitor tick dropped, previous check still running",
                schedule=self.schedule,
                skipped_ticks=self.skipped_ticks,
            )
            return False
        self._inflight = asyncio.create_task(self._tick())
        return True

    def stop(self) -> None:
        """Ask ``run`` to return after the check in flight, if any."""
        self._stop_event.set()

    async def run(self) -> None:
        """Check now, then on every scheduled minute until stopped."""
        log_with_source(
            logger,
            "monitor",
            "info",
            "Monitor started",
            schedule=self.schedule,
            job_name=self.job_name,
            view_name=self.view_name,
        )
        self.trigger()
        try:
            while not self._stop_event.is_set():
                now = local_now()
                delay = seconds_until_next_minute(now)
                next_minute = now + timedelta(seconds=delay)
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                except TimeoutError:
                    if self.is_due(next_minute):
                        self.trigger()
        finally:
            if self._inflight is not None and not self._inflight.done():
                await self._inflight
            log_with_source(logger, "monitor", "info", "Monitor stopped")
