"""Unit tests for the update queue and job records."""

from unittest.mock import Mock

import pytest
import redis

from ticket_notifier.store.exceptions import MalformedJobError, StoreConnectionError
from ticket_notifier.subscriptions.models import SubscriberSetKind
from ticket_notifier.updates import NotificationJob, UpdateQueue
from ticket_notifier.updates.models import JobField


class FixedClock:
    """Returns the same millisecond until advanced."""

    def __init__(self, now_ms=1700000000000):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def queue(redis_client, clock):
    return UpdateQueue(redis_client, clock=clock)


class TestNotificationJob:
    def test_from_hash_reads_required_fields(self):
        job = NotificationJob.from_hash(
            "ticket:update:42:1",
            {"subscriberset": "ticket:subscribers:42:", "subject": "S", "body": "B"},
        )
        assert job.subscriber_set == "ticket:subscribers:42:"
        assert job.subject == "S"
        assert job.body == "B"
        assert job.global_set == "ticket:subscribers"

    def test_from_hash_reads_global_set(self):
        job = NotificationJob.from_hash(
            "ticket:update:42:1",
            {
                "subscriberset": "ticket:subscribers:42:",
                "subject": "S",
                "body": "B",
                "globalset": "project:subscribers",
            },
        )
        assert job.global_set == "project:subscribers"

    def test_from_hash_missing_field(self):
        with pytest.raises(MalformedJobError) as exc_info:
            NotificationJob.from_hash("ticket:update:42:1", {"subscriberset": "x", "subject": "S"})
        assert exc_info.value.missing_fields == ["body"]

    def test_from_hash_gone(self):
        with pytest.raises(MalformedJobError) as exc_info:
            NotificationJob.from_hash("ticket:update:42:1", {})
        assert exc_info.value.missing_fields == ["body", "subject", "subscriberset"]

    def test_empty_strings_are_valid_values(self):
        job = NotificationJob.from_hash(
            "ticket:update:42:1", {"subscriberset": "s", "subject": "", "body": ""}
        )
        assert job.subject == ""
        assert job.body == ""


class TestEnqueue:
    def test_enqueue_writes_hash_and_appends_key(self, queue, redis_client):
        job_key = queue.enqueue(42, "ticket:subscribers:42:", "Status changed", "Now closed")

        assert job_key == "ticket:update:42:1700000000000"
        assert redis_client.lrange("ticket:updates", 0, -1) == [job_key]
        assert redis_client.hgetall(job_key) == {
            "subscriberset": "ticket:subscribers:42:",
            "subject": "Status changed",
            "body": "Now closed",
            "globalset": "ticket:subscribers",
        }

    def test_enqueue_project_kind(self, queue, redis_client):
        job_key = queue.enqueue(
            7, "ticket:subscribers:7:", "S", "B", kind=SubscriberSetKind.PROJECT_UPDATE
        )
        assert redis_client.hget(job_key, JobField.GLOBAL_SET.value) == "project:subscribers"

    def test_same_millisecond_gets_distinct_keys(self, queue, redis_client):
        first = queue.enqueue(42, "ticket:subscribers:42:", "1", "1")
        second = queue.enqueue(42, "ticket:subscribers:42:", "2", "2")

        assert first == "ticket:update:42:1700000000000"
        assert second == "ticket:update:42:1700000000001"
        assert redis_client.hget(first, "subject") == "1"
        assert redis_client.hget(second, "subject") == "2"

    def test_ttl_applied_when_configured(self, redis_client, clock):
        queue = UpdateQueue(redis_client, job_ttl_seconds=3600, clock=clock)
        job_key = queue.enqueue(42, "ticket:subscribers:42:", "S", "B")
        assert 0 < redis_client.ttl(job_key) <= 3600

    def test_no_ttl_by_default(self, queue, redis_client):
        job_key = queue.enqueue(42, "ticket:subscribers:42:", "S", "B")
        assert redis_client.ttl(job_key) == -1

    def test_invalid_arguments(self, queue):
        with pytest.raises(ValueError):
            queue.enqueue(-1, "ticket:subscribers:1:", "S", "B")
        with pytest.raises(ValueError):
            queue.enqueue(1, "", "S", "B")
        with pytest.raises(ValueError):
            queue.enqueue(1, "ticket:subscribers:1:", None, "B")

    def test_enqueue_store_failure(self, clock):
        client = Mock()
        client.hset.side_effect = redis.ConnectionError("Connection refused")
        with pytest.raises(StoreConnectionError):
            UpdateQueue(client, clock=clock).enqueue(1, "ticket:subscribers:1:", "S", "B")
        client.rpush.assert_not_called()


class TestDrainOperations:
    def test_pop_is_fifo(self, queue, clock):
        keys = []
        for n in range(3):
            clock.now_ms += 10
            keys.append(queue.enqueue(n, f"ticket:subscribers:{n}:", str(n), str(n)))

        assert [queue.pop_oldest() for _ in range(3)] == keys
        assert queue.pop_oldest() is None

    def test_fifo_across_tickets(self, queue, clock):
        a = queue.enqueue(1, "ticket:subscribers:1:", "a", "a")
        clock.now_ms += 1
        b = queue.enqueue(2, "ticket:subscribers:2:", "b", "b")
        clock.now_ms += 1
        c = queue.enqueue(1, "ticket:subscribers:1:", "c", "c")

        assert queue.pending_keys() == [a, b, c]
        assert queue.pop_oldest() == a

    def test_pop_empty_queue(self, queue):
        assert queue.pop_oldest() is None

    def test_fetch_and_discard(self, queue, redis_client):
        job_key = queue.enqueue(42, "ticket:subscribers:42:", "S", "B")
        assert queue.pop_oldest() == job_key

        job = queue.fetch_job(job_key)
        assert job.key == job_key
        assert job.subject == "S"

        queue.discard_job(job_key)
        assert redis_client.exists(job_key) == 0

    def test_fetch_missing_hash_is_malformed(self, queue):
        with pytest.raises(MalformedJobError):
            queue.fetch_job("ticket:update:42:1")

    def test_fetch_wrong_type_is_malformed(self, queue, redis_client):
        redis_client.set("ticket:update:42:1", "not a hash")

        with pytest.raises(MalformedJobError) as exc_info:
            queue.fetch_job("ticket:update:42:1")

        assert exc_info.value.job_key == "ticket:update:42:1"
        assert "WRONGTYPE" in str(exc_info.value)

    def test_pending_count_and_keys(self, queue):
        assert queue.pending_count() == 0
        assert queue.pending_keys() == []

        for n in range(4):
            queue.enqueue(n, f"ticket:subscribers:{n}:", "S", "B")

        assert queue.pending_count() == 4
        assert len(queue.pending_keys(limit=2)) == 2
        assert queue.pending_keys(limit=0) == []

    def test_pop_store_failure(self):
        client = Mock()
        client.lpop.side_effect = redis.TimeoutError("timeout")
        with pytest.raises(StoreConnectionError):
            UpdateQueue(client).pop_oldest()
