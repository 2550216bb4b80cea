"""Shared fixtures for the ticket notifier test suite."""

import fakeredis
import pytest

from ticket_notifier.config.environment import EnvironmentConfig
from ticket_notifier.config.models import AppConfig
from ticket_notifier.logging.context import clear_log_context
from ticket_notifier.store.connection import StoreConnection


@pytest.fixture
def redis_client():
    """In-memory Redis with string responses, on a server private to the test."""
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def store(redis_client):
    return StoreConnection("redis://localhost:6379/0", client=redis_client)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Minimal valid environment for load_config()."""
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_PORT", "587")
    for name in ("SMTP_USERNAME", "SMTP_PASSWORD", "SMTP_TLS_OFF", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def env_config():
    return EnvironmentConfig(
        redis_url="redis://localhost:6379/0",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_username="mailer@example.com",
        smtp_password="secret123",
    )


@pytest.fixture
def app_config():
    return AppConfig()


@pytest.fixture(autouse=True)
def reset_log_context():
    clear_log_context()
    yield
    clear_log_context()
