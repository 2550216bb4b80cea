"""Unit tests for the per-recipient mail dispatcher."""

from unittest.mock import Mock

import pytest

from ticket_notifier.config.models import EmailConfig
from ticket_notifier.notifications import (
    DispatchResult,
    MailDispatcher,
    SMTPClient,
    SMTPDeliveryError,
    normalize_recipient,
)


@pytest.fixture
def smtp_client():
    return Mock(spec=SMTPClient)


@pytest.fixture
def dispatcher(env_config, smtp_client):
    return MailDispatcher(env_config=env_config, smtp_client=smtp_client)


class TestMailDispatcher:
    def test_send_builds_message_from_system_address(self, dispatcher, smtp_client, env_config):
        result = dispatcher.send("alice@example.com", "Ticket #42 updated", "Now closed")

        assert result == DispatchResult(recipient="alice@example.com", status="sent")
        assert result.sent

        message, passed_env, timeout = smtp_client.send.call_args.args
        assert message["From"] == "System <system@example.com>"
        assert message["To"] == "alice@example.com"
        assert message["Subject"] == "Ticket #42 updated"
        assert message.get_content().strip() == "Now closed"
        assert passed_env is env_config
        assert timeout == 10

    def test_custom_sender_and_timeout(self, env_config, smtp_client):
        dispatcher = MailDispatcher(
            env_config=env_config,
            email_config=EmailConfig(from_address="Tracker <tracker@example.com>", timeout_seconds=3),
            smtp_client=smtp_client,
        )
        dispatcher.send("bob@example.com", "S", "B")

        message, _, timeout = smtp_client.send.call_args.args
        assert message["From"] == "Tracker <tracker@example.com>"
        assert timeout == 3

    def test_empty_subject_and_body_are_sent(self, dispatcher, smtp_client):
        result = dispatcher.send("alice@example.com", "", "")

        assert result.sent
        smtp_client.send.assert_called_once()

    def test_invalid_address_not_sent(self, dispatcher, smtp_client):
        result = dispatcher.send("not-an-address", "S", "B")

        assert result.status == "invalid_address"
        assert not result.sent
        assert result.error
        smtp_client.send.assert_not_called()

    def test_transport_failure_returned(self, dispatcher, smtp_client):
        smtp_client.send.side_effect = SMTPDeliveryError("SMTP error during message delivery: 550")

        result = dispatcher.send("alice@example.com", "S", "B")

        assert result.status == "failed"
        assert "550" in result.error

    def test_multiline_subject_folded(self, dispatcher, smtp_client):
        result = dispatcher.send("alice@example.com", "Ticket updated\nline two\r\nline three", "B")

        assert result.sent
        message = smtp_client.send.call_args.args[0]
        assert message["Subject"] == "Ticket updated line two line three"

    def test_unbuildable_message_returned(self, env_config, smtp_client):
        dispatcher = MailDispatcher(
            env_config=env_config,
            email_config=EmailConfig(from_address="Tracker\n<tracker@example.com>"),
            smtp_client=smtp_client,
        )

        result = dispatcher.send("alice@example.com", "S", "B")

        assert result.status == "invalid_message"
        assert result.error
        smtp_client.send.assert_not_called()


class TestNormalizeRecipient:
    def test_bare_address(self):
        assert normalize_recipient("alice@example.com") == "alice@example.com"

    def test_display_name_form(self):
        assert normalize_recipient("Alice <alice@example.com>") == "alice@example.com"

    def test_whitespace_trimmed(self):
        assert normalize_recipient("  alice@example.com ") == "alice@example.com"

    @pytest.mark.parametrize("bad", ["", "   ", "alice", "alice@", None])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            normalize_recipient(bad)
