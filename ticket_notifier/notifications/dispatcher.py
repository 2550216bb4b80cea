"""Per-recipient mail dispatch."""

import logging
import re
from email.message import EmailMessage
from email.utils import parseaddr
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from ticket_notifier.config.environment import EnvironmentConfig
from ticket_notifier.config.models import EmailConfig
from ticket_notifier.logging import get_logger

from .models import DispatchResult, SMTPDeliveryError
from .smtp_client import SMTPClient

logger = get_logger(__name__, component="dispatcher")

_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


class MailDispatcher:
    """Delivers one message to one recipient.

    Problems with a single recipient (unparseable address, transport
    rejection) are returned as a DispatchResult instead of raised, so the
    caller can carry on with the remaining recipients.
    """

    def __init__(
        self,
        env_config: EnvironmentConfig,
        email_config: Optional[EmailConfig] = None,
        smtp_client: Optional[SMTPClient] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Args:
            env_config: SMTP endpoint and credentials
            email_config: Sender address and timeout (defaults apply if None)
            smtp_client: SMTP client (creates default if None)
            logger_instance: Logger (uses module logger if None)
        """
        self.env_config = env_config
        self.email_config = email_config or EmailConfig()
        self.smtp_client = smtp_client or SMTPClient()
        self.logger = logger_instance or logger

    def send(self, recipient: str, subject: str, body: str) -> DispatchResult:
        """
        Send ``subject``/``body`` to ``recipient`` from the system address.

        Args:
            recipient: Subscriber address as stored in the subscriber set
            subject: Subject line
            body: Plain-text body

        Returns:
            DispatchResult with status "sent", "invalid_address",
            "invalid_message" or "failed"
        """
        try:
            address = normalize_recipient(recipient)
        except ValueError as e:
            self.logger.warning(
                f"Skipping invalid recipient address: {e}",
                extra={"event": "dispatch.invalid_address", "recipient": recipient},
            )
            return DispatchResult(recipient=recipient, status="invalid_address", error=str(e))

        try:
            message = build_message(self.email_config.from_address, address, subject, body)
        except ValueError as e:
            self.logger.error(
                f"Could not build message for {address}: {e}",
                extra={"event": "dispatch.invalid_message", "recipient": address},
            )
            return DispatchResult(recipient=recipient, status="invalid_message", error=str(e))

        try:
            self.smtp_client.send(message, self.env_config, self.email_config.timeout_seconds)
        except SMTPDeliveryError as e:
            self.logger.error(
                f"Delivery to {address} failed: {e}",
                extra={
                    "event": "dispatch.failed",
                    "recipient": address,
                    "error_type": type(e.__cause__ or e).__name__,
                },
            )
            return DispatchResult(recipient=recipient, status="failed", error=str(e))

        self.logger.info(
            f"Notification '{subject}' sent to {address}",
            extra={"event": "dispatch.sent", "recipient": address},
        )
        return DispatchResult(recipient=recipient, status="sent")


def normalize_recipient(recipient: str) -> str:
    """Validate a subscriber address and return its normalized form.

    Accepts a bare address or a display-name form ("Ada <ada@example.com>").

    Raises:
        ValueError: If the address cannot be parsed
    """
    if not isinstance(recipient, str) or not recipient.strip():
        raise ValueError("Recipient address is empty")

    _, address = parseaddr(recipient.strip())
    try:
        validated = validate_email(address or recipient.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"'{recipient}' is not a valid email address - {e}") from e
    return validated.normalized


def build_message(sender: str, recipient: str, subject: str, body: str) -> EmailMessage:
    """Assemble a plain-text message.

    Line breaks in the subject are folded into single spaces; email headers
    cannot carry them.

    Raises:
        ValueError: If a header value is still rejected by the email package
    """
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = _LINE_BREAKS.sub(" ", subject)
    message.set_content(body)
    return message
