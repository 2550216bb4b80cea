"""Data models and exceptions for mail delivery."""

from dataclasses import dataclass
from typing import Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when the SMTP transport rejects or fails to deliver a message."""

    pass


@dataclass
class DispatchResult:
    """Outcome of one send attempt to one recipient.

    Attributes:
        recipient: Address the attempt was made for
        status: "sent", "invalid_address", "invalid_message" or "failed"
        error: Error message when the attempt did not succeed
    """

    recipient: str
    status: str
    error: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status == "sent"
