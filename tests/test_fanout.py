"""Unit tests for recipient resolution."""

from unittest.mock import Mock

import pytest
import redis

from ticket_notifier.fanout import FanoutResolver
from ticket_notifier.store.exceptions import StoreConnectionError


@pytest.fixture
def resolver(redis_client):
    return FanoutResolver(redis_client)


def test_resolve_returns_intersection(resolver, redis_client):
    redis_client.sadd("ticket:subscribers", "alice@example.com", "carol@example.com", "dave@example.com")
    redis_client.sadd("ticket:subscribers:42:", "alice@example.com", "bob@example.com", "carol@example.com")

    recipients = resolver.resolve("ticket:subscribers", "ticket:subscribers:42:")

    assert set(recipients) == {"alice@example.com", "carol@example.com"}


def test_resolve_has_no_duplicates(resolver, redis_client):
    redis_client.sadd("ticket:subscribers", "alice@example.com")
    redis_client.sadd("ticket:subscribers:42:", "alice@example.com")

    assert resolver.resolve("ticket:subscribers", "ticket:subscribers:42:") == ["alice@example.com"]


def test_missing_per_ticket_set_yields_nobody(resolver, redis_client):
    redis_client.sadd("ticket:subscribers", "alice@example.com")

    assert resolver.resolve("ticket:subscribers", "ticket:subscribers:999:") == []


def test_empty_global_set_yields_nobody(resolver, redis_client):
    redis_client.sadd("ticket:subscribers:42:", "alice@example.com")

    assert resolver.resolve("ticket:subscribers", "ticket:subscribers:42:") == []


def test_project_global_set(resolver, redis_client):
    redis_client.sadd("ticket:subscribers", "alice@example.com")
    redis_client.sadd("project:subscribers", "bob@example.com")
    redis_client.sadd("ticket:subscribers:7:", "alice@example.com", "bob@example.com")

    assert resolver.resolve("project:subscribers", "ticket:subscribers:7:") == ["bob@example.com"]


def test_store_failure_translated():
    client = Mock()
    client.sinter.side_effect = redis.ConnectionError("Connection refused")

    with pytest.raises(StoreConnectionError):
        FanoutResolver(client).resolve("ticket:subscribers", "ticket:subscribers:1:")
