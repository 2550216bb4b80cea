"""Batch worker draining the update queue."""

from .models import JobOutcome, TickResult
from .runner import DEFAULT_BATCH_SIZE, BatchWorker

__all__ = [
    "BatchWorker",
    "TickResult",
    "JobOutcome",
    "DEFAULT_BATCH_SIZE",
]
