"""Update queue: pending notification jobs."""

from .models import REQUIRED_FIELDS, JobField, NotificationJob
from .queue import UpdateQueue

__all__ = [
    "UpdateQueue",
    "NotificationJob",
    "JobField",
    "REQUIRED_FIELDS",
]
