"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_FALSY_VALUES = {"", "0", "false", "no", "off"}


class EnvironmentConfig:
    """Secrets and endpoints sourced from the process environment."""

    def __init__(
        self,
        redis_url: str,
        smtp_host: str,
        smtp_port: int,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_tls_off: bool = False,
        log_level: Optional[str] = None,
    ):
        self.redis_url = redis_url
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.smtp_tls_off = smtp_tls_off
        self.log_level = log_level

    @property
    def has_smtp_credentials(self) -> bool:
        return bool(self.smtp_username and self.smtp_password)

    def __repr__(self) -> str:
        return (
            f"EnvironmentConfig(smtp_host={self.smtp_host!r}, smtp_port={self.smtp_port!r}, "
            f"smtp_tls_off={self.smtp_tls_off!r}, has_smtp_credentials={self.has_smtp_credentials})"
        )


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Required environment variables:
    - REDIS_URL: Redis connection URL holding the queue and subscriber sets
    - SMTP_HOST: SMTP server hostname
    - SMTP_PORT: SMTP server port (1-65535)

    Optional environment variables:
    - SMTP_USERNAME / SMTP_PASSWORD: SMTP credentials (both or neither)
    - SMTP_TLS_OFF: Any truthy value selects the unencrypted transport (local relays only)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    errors = []

    redis_url = os.getenv("REDIS_URL")
    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")

    smtp_username = os.getenv("SMTP_USERNAME") or None
    smtp_password = os.getenv("SMTP_PASSWORD") or None
    smtp_tls_off = parse_flag(os.getenv("SMTP_TLS_OFF"))
    log_level = os.getenv("LOG_LEVEL")

    if not redis_url:
        errors.append("Missing required environment variable: REDIS_URL")
    elif not redis_url.startswith(("redis://", "rediss://", "unix://")):
        errors.append(
            f"Invalid REDIS_URL: '{redis_url}'. Must start with redis://, rediss:// or unix://"
        )

    if not smtp_host:
        errors.append("Missing required environment variable: SMTP_HOST")

    if not smtp_port_str:
        errors.append("Missing required environment variable: SMTP_PORT")

    smtp_port = None
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if smtp_port < 1 or smtp_port > 65535:
                errors.append(
                    f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535."
                )
        except ValueError:
            errors.append(
                f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer."
            )

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if smtp_username and not smtp_password:
        errors.append(
            "SMTP_USERNAME is set but SMTP_PASSWORD is not. Both must be set for authentication."
        )
    elif smtp_password and not smtp_username:
        errors.append(
            "SMTP_PASSWORD is set but SMTP_USERNAME is not. Both must be set for authentication."
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your settings",
                "Ensure REDIS_URL, SMTP_HOST and SMTP_PORT are set",
                "Verify SMTP_PORT is a number between 1 and 65535",
            ],
        )

    return EnvironmentConfig(
        redis_url=redis_url,
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_username=smtp_username,
        smtp_password=smtp_password,
        smtp_tls_off=smtp_tls_off,
        log_level=log_level.upper() if log_level else None,
    )


def parse_flag(value: Optional[str]) -> bool:
    """Interpret an environment flag; unset or falsy spellings mean False."""
    if value is None:
        return False
    return value.strip().lower() not in _FALSY_VALUES
