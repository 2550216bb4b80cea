"""Cron scheduling for the batch worker."""

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ticket_notifier.config.cron import DEFAULT_CRON_EXPRESSION, build_cron_trigger
from ticket_notifier.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "ticket-update-mailer"


class SchedulerService:
    """
    Runs the worker tick on a cron cadence, at most one tick at a time.

    Uniqueness is enforced twice: APScheduler's ``max_instances=1`` stops
    overlapping scheduled runs, and a non-blocking guard lock shared with
    trigger_now() stops a manual run from overlapping a scheduled one.
    """

    def __init__(
        self,
        tick_callable: Callable[[], Any],
        cron_expression: str = DEFAULT_CRON_EXPRESSION,
        timezone_name: str = "UTC",
        run_on_startup: bool = False,
        shutdown_event: Optional[threading.Event] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        """
        Args:
            tick_callable: Function run on each tick (e.g. BatchWorker.run_tick)
            cron_expression: 5- or 6-field cron expression
            timezone_name: Timezone the cron expression is evaluated in
            run_on_startup: Also run once as soon as the scheduler starts
            shutdown_event: Set on shutdown for coordination with the main thread
            scheduler: Pre-built scheduler (tests inject one)
        """
        self.tick_callable = tick_callable
        self.cron_expression = cron_expression
        self.timezone_name = timezone_name
        self.run_on_startup = run_on_startup
        self.shutdown_event = shutdown_event
        self.trigger = build_cron_trigger(cron_expression, timezone=timezone_name)
        self._run_guard = threading.Lock()

        self.scheduler = scheduler or BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # never two ticks of this job at once
                "coalesce": True,  # missed fires collapse into one run
                "misfire_grace_time": 60,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the tick job and start the background scheduler."""
        next_run = datetime.now(timezone.utc) if self.run_on_startup else None

        job_kwargs = {}
        if next_run is not None:
            job_kwargs["next_run_time"] = next_run

        self.scheduler.add_job(
            func=self.run_exclusive,
            trigger=self.trigger,
            id=JOB_ID,
            name="Ticket update mailer",
            replace_existing=True,
            **job_kwargs,
        )

        if not self.scheduler.running:
            self.scheduler.start()

        scheduled = self.get_next_run_time()
        logger.info(
            f"Scheduler started with cron '{self.cron_expression}'",
            extra={
                "event": "scheduler.started",
                "cron": self.cron_expression,
                "next_run_time": scheduled.isoformat() if scheduled else None,
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the scheduler.

        Args:
            wait: Wait for a running tick to finish before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def run_exclusive(self) -> Optional[Any]:
        """
        Run one tick unless another is in flight.

        Returns:
            The tick callable's result, or None when skipped
        """
        if not self._run_guard.acquire(blocking=False):
            logger.warning(
                "Tick skipped: previous tick still in progress",
                extra={"event": "scheduler.tick.skipped", "reason": "tick_in_flight"},
            )
            return None

        try:
            return self.tick_callable()
        except Exception:
            logger.exception(
                "Tick raised an unexpected error",
                extra={"event": "scheduler.tick.failed"},
            )
            return None
        finally:
            self._run_guard.release()

    def trigger_now(self) -> Optional[Any]:
        """Run a tick synchronously in the calling thread (still exclusive)."""
        logger.info(
            "Triggering immediate tick",
            extra={"event": "scheduler.trigger_now"},
        )
        return self.run_exclusive()

    def is_running(self) -> bool:
        return self.scheduler.running

    def is_tick_in_flight(self) -> bool:
        return self._run_guard.locked()

    def get_next_run_time(self) -> Optional[datetime]:
        """Next fire time of the tick job, or None if not registered."""
        job = self.scheduler.get_job(JOB_ID)
        return getattr(job, "next_run_time", None) if job else None
