"""Unit tests for the NotificationPipeline composition root."""

from unittest.mock import MagicMock, Mock

import pytest

from ticket_notifier.config.models import AppConfig, QueueConfig
from ticket_notifier.notifications import SMTPClient
from ticket_notifier.service import NotificationPipeline
from ticket_notifier.subscriptions import SubscriberSetKind


@pytest.fixture
def smtp_client():
    return Mock(spec=SMTPClient)


@pytest.fixture
def pipeline(app_config, env_config, redis_client, smtp_client):
    pipeline = NotificationPipeline.from_config(
        app_config, env_config, client=redis_client, smtp_client=smtp_client
    )
    yield pipeline
    pipeline.membership_sync.shutdown()


def test_from_config_wires_settings(env_config, redis_client):
    app_config = AppConfig(queue=QueueConfig(batch_size=3, job_ttl_seconds=60, discard_processed_jobs=False))

    pipeline = NotificationPipeline.from_config(app_config, env_config, client=redis_client)
    try:
        assert pipeline.store.client is redis_client
        assert pipeline.queue.job_ttl_seconds == 60
        assert pipeline.worker.batch_size == 3
        assert pipeline.worker.discard_processed_jobs is False
        assert pipeline.worker.dispatcher.email_config is app_config.email
    finally:
        pipeline.close()


def test_enqueue_derives_per_ticket_set(pipeline, redis_client):
    job_key = pipeline.enqueue_ticket_update(42, "Ticket #42 updated", "Body")

    assert job_key.startswith("ticket:update:42:")
    assert redis_client.hget(job_key, "subscriberset") == "ticket:subscribers:42:"
    assert redis_client.hget(job_key, "globalset") == "ticket:subscribers"


def test_enqueue_with_explicit_set_and_kind(pipeline, redis_client):
    job_key = pipeline.enqueue_ticket_update(
        42, "S", "B", kind=SubscriberSetKind.PROJECT_UPDATE, subscriber_set="custom:set"
    )

    assert redis_client.hget(job_key, "subscriberset") == "custom:set"
    assert redis_client.hget(job_key, "globalset") == "project:subscribers"


def test_subscribe_to_ticket(pipeline, redis_client):
    assert pipeline.subscribe_to_ticket(42, "alice@example.com") is True
    assert redis_client.smembers("ticket:subscribers:42:") == {"alice@example.com"}

    pipeline.subscribe_to_ticket(42, "alice@example.com", wanted=False)
    assert redis_client.smembers("ticket:subscribers:42:") == set()


def test_set_membership_is_detached(pipeline, redis_client):
    future = pipeline.set_membership(SubscriberSetKind.TICKET_UPDATE, "alice@example.com", True)

    assert future.result(timeout=5) is True
    assert redis_client.smembers("ticket:subscribers") == {"alice@example.com"}


def test_run_tick_sends_through_smtp_client(pipeline, smtp_client):
    pipeline.subscribe_to_ticket(42, "alice@example.com")
    pipeline.set_membership(SubscriberSetKind.TICKET_UPDATE, "alice@example.com", True).result(timeout=5)
    pipeline.enqueue_ticket_update(42, "Ticket #42 updated", "Body")

    result = pipeline.run_tick()

    assert result.messages_sent == 1
    message = smtp_client.send.call_args.args[0]
    assert message["To"] == "alice@example.com"
    assert message["From"] == "System <system@example.com>"


def test_close_shuts_down_sync_and_store(app_config, env_config):
    client = MagicMock()
    pipeline = NotificationPipeline.from_config(app_config, env_config, client=client)

    pipeline.close()

    client.close.assert_called_once()
    with pytest.raises(RuntimeError):
        pipeline.set_membership(SubscriberSetKind.TICKET_UPDATE, "alice@example.com", True)
