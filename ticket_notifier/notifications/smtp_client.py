"""SMTP client wrapper for email delivery.

Thin wrapper around smtplib selecting one of three transports:

- SMTP_TLS_OFF set: plain SMTP, no encryption (local/dev relays only)
- port 465: implicit TLS (SMTP_SSL)
- any other port: SMTP upgraded with STARTTLS

Every call opens and closes its own connection so one slow recipient never
holds a connection other sends depend on.
"""

import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional

from ticket_notifier.config.environment import EnvironmentConfig
from ticket_notifier.logging import get_logger

from .models import SMTPDeliveryError

logger = get_logger(__name__, component="smtp")

IMPLICIT_TLS_PORT = 465


class SMTPClient:
    """Sends fully built messages over SMTP.

    Connection factories are injectable so tests never open sockets.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        """
        Args:
            smtp_factory: Creates SMTP instances (defaults to smtplib.SMTP)
            smtp_ssl_factory: Creates SMTP_SSL instances (defaults to smtplib.SMTP_SSL)
        """
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(
        self,
        message: EmailMessage,
        env_config: EnvironmentConfig,
        timeout: float = 10,
    ) -> None:
        """Deliver one message.

        Args:
            message: Fully constructed EmailMessage
            env_config: SMTP host, port, credentials and TLS switch
            timeout: Socket timeout for the connection in seconds

        Raises:
            SMTPDeliveryError: If connecting, authenticating or sending fails
        """
        smtp = None
        host, port = env_config.smtp_host, env_config.smtp_port
        try:
            if env_config.smtp_tls_off:
                logger.debug(f"Connecting to {host}:{port} without TLS")
                smtp = self.smtp_factory(host, port, timeout=timeout)
            elif port == IMPLICIT_TLS_PORT:
                logger.debug(f"Connecting to {host}:{port} with implicit TLS")
                smtp = self.smtp_ssl_factory(
                    host, port, context=ssl.create_default_context(), timeout=timeout
                )
            else:
                logger.debug(f"Connecting to {host}:{port} with STARTTLS")
                smtp = self.smtp_factory(host, port, timeout=timeout)
                smtp.starttls(context=ssl.create_default_context())

            if env_config.has_smtp_credentials:
                smtp.login(env_config.smtp_username, env_config.smtp_password)

            smtp.send_message(message)
            logger.debug(f"Message accepted for {message['To']}")

        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}") from e
        except Exception as e:
            raise SMTPDeliveryError(f"Unexpected error during SMTP delivery: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")
