"""Batch worker draining the update queue on each scheduled tick."""

from typing import Optional
from uuid import uuid4

from ticket_notifier.fanout.resolver import FanoutResolver
from ticket_notifier.logging import get_logger
from ticket_notifier.logging.context import log_context
from ticket_notifier.notifications.dispatcher import MailDispatcher
from ticket_notifier.store.connection import StoreConnection
from ticket_notifier.store.exceptions import MalformedJobError, StoreConnectionError, StoreDataError
from ticket_notifier.updates.queue import UpdateQueue
from ticket_notifier.utils.timestamps import format_timestamp_for_log, utc_now

from .models import JobOutcome, TickResult

logger = get_logger(__name__, component="worker")

DEFAULT_BATCH_SIZE = 5


class BatchWorker:
    """
    Drains a bounded batch of jobs per tick: pop, resolve, dispatch.

    Run-uniqueness is the scheduler's job; the worker holds no locks and
    relies on the atomic LPOP for exclusive ownership of each job.

    Failure handling:
    - store unreachable: the tick aborts (nothing further popped)
    - malformed job (missing fields, wrong key type): recorded as failed, the batch continues
    - recipient send failure: logged and counted, siblings still get mail
    - batch cutoff: a warning if work is left, the next tick continues the backlog
    """

    def __init__(
        self,
        store: StoreConnection,
        queue: UpdateQueue,
        resolver: FanoutResolver,
        dispatcher: MailDispatcher,
        batch_size: int = DEFAULT_BATCH_SIZE,
        discard_processed_jobs: bool = True,
    ):
        """
        Args:
            store: Store connection, pinged at the start of every tick
            queue: Update queue to drain
            resolver: Recipient resolver
            dispatcher: Per-recipient mail dispatcher
            batch_size: Cutoff; the tick stops once more than this many jobs ran
            discard_processed_jobs: Delete job hashes after consuming them
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        self.store = store
        self.queue = queue
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.batch_size = batch_size
        self.discard_processed_jobs = discard_processed_jobs

    def run_tick(self) -> TickResult:
        """
        Execute one drain pass.

        Never raises; every outcome, including an aborted tick, is reported
        in the returned TickResult.
        """
        result = TickResult(tick_id=uuid4().hex, started_at=utc_now())

        with log_context(tick_id=result.tick_id):
            logger.info(
                "Worker tick started",
                extra={"event": "worker.tick.started", "batch_size": self.batch_size},
            )

            try:
                self.store.ping()
                self._drain(result)
            except (StoreConnectionError, StoreDataError) as e:
                # A data error here comes from the queue list itself, not one job
                result.aborted = True
                result.error = str(e)
                logger.error(
                    f"Worker tick aborted, store unusable: {e}",
                    extra={
                        "event": "worker.tick.aborted",
                        "jobs_processed": result.jobs_processed,
                    },
                )
            finally:
                result.finished_at = utc_now()

            logger.info(
                f"Worker tick completed: {result.jobs_processed} job(s), "
                f"{result.messages_sent} sent, {result.send_failures} failed sends, "
                f"{result.jobs_failed} malformed",
                extra={
                    "event": "worker.tick.completed",
                    "started_at": format_timestamp_for_log(result.started_at),
                    "duration_ms": int(result.duration_seconds * 1000),
                    "jobs_processed": result.jobs_processed,
                    "jobs_failed": result.jobs_failed,
                    "messages_sent": result.messages_sent,
                    "send_failures": result.send_failures,
                    "cutoff_reached": result.cutoff_reached,
                    "aborted": result.aborted,
                },
            )

        return result

    def _drain(self, result: TickResult) -> None:
        processed = 0

        while True:
            job_key = self.queue.pop_oldest()
            if job_key is None:
                logger.debug("Update queue drained", extra={"event": "worker.queue.drained"})
                return

            result.jobs.append(self._process_job(job_key))
            processed += 1

            if processed > self.batch_size:
                result.cutoff_reached = True
                remaining = self._remaining()
                # Only warn when work is actually left behind
                log = logger.info if remaining == 0 else logger.warning
                log(
                    f"Ticket update batch size ({self.batch_size}) exhausted after "
                    f"{processed} jobs; remaining updates wait for the next tick",
                    extra={
                        "event": "worker.batch.exhausted",
                        "jobs_processed": processed,
                        "remaining": remaining,
                    },
                )
                return

    def _process_job(self, job_key: str) -> JobOutcome:
        with log_context(job_key=job_key):
            try:
                job = self.queue.fetch_job(job_key)
            except MalformedJobError as e:
                logger.error(
                    f"Dropping malformed job: {e}",
                    extra={
                        "event": "worker.job.malformed",
                        "missing_fields": e.missing_fields,
                    },
                )
                self._discard(job_key)
                return JobOutcome(job_key=job_key, status="malformed", error=str(e))

            try:
                recipients = self.resolver.resolve(job.global_set, job.subscriber_set)
            except StoreDataError as e:
                logger.error(
                    f"Dropping job with unusable subscriber set: {e}",
                    extra={
                        "event": "worker.job.malformed",
                        "subscriber_set": job.subscriber_set,
                    },
                )
                self._discard(job_key)
                return JobOutcome(job_key=job_key, status="malformed", error=str(e))

            outcome = JobOutcome(job_key=job_key, status="dispatched", recipients=len(recipients))

            for recipient in recipients:
                if self._send(recipient, job.subject, job.body):
                    outcome.sent += 1
                else:
                    outcome.failed += 1

            logger.info(
                f"Job dispatched to {outcome.sent}/{outcome.recipients} recipient(s)",
                extra={
                    "event": "worker.job.dispatched",
                    "subscriber_set": job.subscriber_set,
                    "recipients": outcome.recipients,
                    "sent": outcome.sent,
                    "failed": outcome.failed,
                },
            )

            self._discard(job_key)
            return outcome

    def _send(self, recipient: str, subject: str, body: str) -> bool:
        try:
            dispatch = self.dispatcher.send(recipient, subject, body)
        except Exception as e:
            # Per-recipient failures never abort the job
            logger.error(
                f"Unexpected error sending to {recipient}: {e}",
                exc_info=True,
                extra={
                    "event": "worker.send.failed",
                    "recipient": recipient,
                    "error_type": type(e).__name__,
                },
            )
            return False

        if not dispatch.sent:
            logger.warning(
                f"Send to {recipient} failed: {dispatch.error}",
                extra={
                    "event": "worker.send.failed",
                    "recipient": recipient,
                    "status": dispatch.status,
                },
            )
        return dispatch.sent

    def _discard(self, job_key: str) -> None:
        if self.discard_processed_jobs:
            self.queue.discard_job(job_key)

    def _remaining(self) -> Optional[int]:
        try:
            return self.queue.pending_count()
        except StoreConnectionError:
            return None
