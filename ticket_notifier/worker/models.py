"""Data models for batch worker ticks."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class JobOutcome:
    """
    What happened to one popped job.

    Attributes:
        job_key: Key popped from the queue
        status: "dispatched" or "malformed"
        recipients: Number of recipients resolved
        sent: Number of successful sends
        failed: Number of per-recipient failures
        error: Error message for malformed jobs
    """

    job_key: str
    status: str
    recipients: int = 0
    sent: int = 0
    failed: int = 0
    error: Optional[str] = None


@dataclass
class TickResult:
    """
    Outcome of one scheduled invocation of the batch worker.

    Attributes:
        tick_id: Identifier carried in the tick's log context
        started_at: UTC time the tick began
        finished_at: UTC time the tick ended
        jobs: Per-job outcomes in pop order
        cutoff_reached: The batch cutoff stopped the tick with work possibly left
        aborted: The store became unreachable; the tick stopped early
        error: Error message when aborted
    """

    tick_id: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    jobs: List[JobOutcome] = field(default_factory=list)
    cutoff_reached: bool = False
    aborted: bool = False
    error: Optional[str] = None

    @property
    def jobs_processed(self) -> int:
        return len(self.jobs)

    @property
    def jobs_failed(self) -> int:
        return sum(1 for job in self.jobs if job.status == "malformed")

    @property
    def messages_sent(self) -> int:
        return sum(job.sent for job in self.jobs)

    @property
    def send_failures(self) -> int:
        return sum(job.failed for job in self.jobs)

    @property
    def had_errors(self) -> bool:
        return self.aborted or self.jobs_failed > 0 or self.send_failures > 0

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
