"""Cron scheduling of the batch worker."""

from .service import JOB_ID, SchedulerService

__all__ = [
    "SchedulerService",
    "JOB_ID",
]
