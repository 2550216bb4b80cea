"""Ordered, Redis-backed handoff of notification jobs.

Producers append job keys to the tail of one list; the single worker pops
from the head. LPOP is atomic and destructive, so no two workers can ever
receive the same key. Each key points at a hash holding the job's fields.
"""

import threading
from typing import Callable, List, Optional

import redis

from ticket_notifier.logging import get_logger
from ticket_notifier.store.connection import translate_store_errors
from ticket_notifier.store.exceptions import MalformedJobError, StoreDataError
from ticket_notifier.store.keys import TICKET_UPDATES_QUEUE, ticket_update_key
from ticket_notifier.subscriptions.models import SubscriberSetKind
from ticket_notifier.utils.timestamps import epoch_millis

from .models import NotificationJob

logger = get_logger(__name__, component="queue")


class UpdateQueue:
    """FIFO queue of notification jobs."""

    def __init__(
        self,
        client: redis.Redis,
        queue_key: str = TICKET_UPDATES_QUEUE,
        job_ttl_seconds: int = 0,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Args:
            client: Redis client (decode_responses=True)
            queue_key: Key of the list holding job keys
            job_ttl_seconds: Expiry applied to job hashes; 0 leaves them persistent
            clock: Returns the current epoch milliseconds (injectable for tests)
        """
        self.client = client
        self.queue_key = queue_key
        self.job_ttl_seconds = job_ttl_seconds
        self.clock = clock or epoch_millis
        self._last_timestamp_ms = 0
        self._timestamp_lock = threading.Lock()

    def enqueue(
        self,
        ticket_id: int,
        subscriber_set: str,
        subject: str,
        body: str,
        kind: SubscriberSetKind = SubscriberSetKind.TICKET_UPDATE,
    ) -> str:
        """
        Store a job and append its key to the queue.

        The hash is written with one multi-field HSET before the key is pushed.
        The two writes are not transactional: a crash in between leaves an
        orphaned hash that expires on its own.

        Args:
            ticket_id: Ticket the update belongs to
            subscriber_set: Per-ticket subscriber set name
            subject: Mail subject line
            body: Plain-text mail body
            kind: Global subscriber set recipients must also belong to

        Returns:
            The job key

        Raises:
            ValueError: If an argument is invalid
            StoreConnectionError: If Redis cannot be reached
        """
        if not isinstance(subscriber_set, str) or not subscriber_set:
            raise ValueError(f"subscriber_set must be a non-empty string, got {subscriber_set!r}")
        if subject is None or body is None:
            raise ValueError("subject and body are required")

        job_key = ticket_update_key(ticket_id, self._next_timestamp_ms())
        job = NotificationJob(
            key=job_key,
            subscriber_set=subscriber_set,
            subject=str(subject),
            body=str(body),
            global_set=SubscriberSetKind(kind).set_name,
        )

        with translate_store_errors("hset"):
            self.client.hset(job_key, mapping=job.to_hash())
        if self.job_ttl_seconds:
            with translate_store_errors("expire"):
                self.client.expire(job_key, self.job_ttl_seconds)
        with translate_store_errors("rpush"):
            depth = self.client.rpush(self.queue_key, job_key)

        logger.info(
            f"Enqueued update for ticket {ticket_id}",
            extra={
                "event": "queue.enqueued",
                "job_key": job_key,
                "ticket_id": ticket_id,
                "subscriber_set": subscriber_set,
                "queue_depth": depth,
            },
        )
        return job_key

    def pop_oldest(self) -> Optional[str]:
        """
        Atomically remove and return the oldest job key.

        Returns:
            Job key, or None if the queue is empty

        Raises:
            StoreConnectionError: If Redis cannot be reached
        """
        with translate_store_errors("lpop"):
            return self.client.lpop(self.queue_key)

    def fetch_job(self, job_key: str) -> NotificationJob:
        """
        Read a job's hash.

        Raises:
            MalformedJobError: If a required field is absent, the hash is gone,
                or the key holds something other than a hash
            StoreConnectionError: If Redis cannot be reached
        """
        try:
            with translate_store_errors("hgetall"):
                fields = self.client.hgetall(job_key)
        except StoreDataError as e:
            raise MalformedJobError(job_key, [], message=f"Job '{job_key}' is unreadable: {e}") from e
        return NotificationJob.from_hash(job_key, fields)

    def discard_job(self, job_key: str) -> None:
        """Delete a consumed job's hash."""
        with translate_store_errors("delete"):
            self.client.delete(job_key)

    def pending_count(self) -> int:
        """Number of job keys waiting in the queue."""
        with translate_store_errors("llen"):
            return int(self.client.llen(self.queue_key))

    def pending_keys(self, limit: int = 100) -> List[str]:
        """Oldest ``limit`` job keys, without removing them."""
        if limit <= 0:
            return []
        with translate_store_errors("lrange"):
            return list(self.client.lrange(self.queue_key, 0, limit - 1))

    def _next_timestamp_ms(self) -> int:
        # Strictly increasing within this process, so bursts on one ticket
        # inside the same millisecond still get distinct keys
        with self._timestamp_lock:
            timestamp_ms = max(int(self.clock()), self._last_timestamp_ms + 1)
            self._last_timestamp_ms = timestamp_ms
            return timestamp_ms
