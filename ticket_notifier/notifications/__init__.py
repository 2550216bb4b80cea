"""Outbound mail for ticket update notifications.

- MailDispatcher: one message to one recipient, failures returned not raised
- SMTPClient: smtplib wrapper (plain, STARTTLS or implicit TLS)
- DispatchResult: per-recipient outcome
"""

from .dispatcher import MailDispatcher, normalize_recipient
from .models import DispatchResult, NotificationError, SMTPDeliveryError
from .smtp_client import SMTPClient

__all__ = [
    # Components
    "MailDispatcher",
    "SMTPClient",
    # Models and results
    "DispatchResult",
    # Exceptions
    "NotificationError",
    "SMTPDeliveryError",
    # Utilities
    "normalize_recipient",
]
