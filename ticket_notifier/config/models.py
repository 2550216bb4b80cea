"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .cron import DEFAULT_CRON_EXPRESSION, CronParseError, build_cron_trigger, validate_timezone


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ScheduleConfig(BaseModel):
    """When the batch worker runs."""

    cron: str = Field(
        DEFAULT_CRON_EXPRESSION,
        description="Cron expression (5-field crontab or 6-field with seconds)",
    )
    timezone: str = Field("UTC", min_length=1, description="Timezone for the cron expression")
    run_on_startup: bool = Field(
        False, description="Run one tick immediately when the daemon starts"
    )

    @field_validator("cron")
    @classmethod
    def validate_cron(cls, v: str) -> str:
        """Reject expressions APScheduler cannot schedule."""
        v = " ".join(v.split())
        try:
            build_cron_trigger(v)
        except CronParseError as e:
            raise ValueError(str(e)) from e
        return v

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        """Reject zone names the scheduler cannot resolve."""
        return validate_timezone(v.strip())

    model_config = {"extra": "forbid"}


class QueueConfig(BaseModel):
    """Update queue and batch settings."""

    batch_size: int = Field(
        5, ge=1, le=1000, description="Jobs handled per tick before the cutoff check trips"
    )
    job_ttl_seconds: int = Field(
        7 * 24 * 3600, ge=0, description="Expiry for job hashes (0 = never expire)"
    )
    discard_processed_jobs: bool = Field(
        True, description="Delete a job hash once the worker has consumed it"
    )

    model_config = {"extra": "forbid"}


class EmailConfig(BaseModel):
    """Outgoing mail settings."""

    from_address: str = Field(
        "System <system@example.com>",
        min_length=3,
        description="Fixed sender for every notification",
    )
    timeout_seconds: int = Field(
        10, ge=1, le=120, description="Per-connection SMTP timeout"
    )

    @field_validator("from_address")
    @classmethod
    def require_mailbox(cls, v: str) -> str:
        """Require something that looks like a mailbox."""
        v = v.strip()
        if "@" not in v:
            raise ValueError(f"from_address must contain an email address: '{v}'")
        return v

    model_config = {"extra": "forbid"}


class StoreConfig(BaseModel):
    """Redis client settings."""

    socket_timeout_seconds: float = Field(
        5.0, gt=0, le=60, description="Socket timeout for every Redis command"
    )

    model_config = {"extra": "forbid"}


class SyncConfig(BaseModel):
    """Detached membership updates."""

    max_workers: int = Field(
        4, ge=1, le=32, description="Threads applying subscriber-set changes"
    )

    model_config = {"extra": "forbid"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True, "extra": "forbid"}


class AppConfig(BaseModel):
    """Root configuration object for the ticket notifier."""

    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}
