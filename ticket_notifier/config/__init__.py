"""Configuration management for the ticket notifier."""

from .cron import DEFAULT_CRON_EXPRESSION, CronParseError, build_cron_trigger
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AppConfig,
    EmailConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    QueueConfig,
    ScheduleConfig,
    StoreConfig,
    SyncConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "ScheduleConfig",
    "QueueConfig",
    "EmailConfig",
    "StoreConfig",
    "SyncConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Cron
    "DEFAULT_CRON_EXPRESSION",
    "CronParseError",
    "build_cron_trigger",
    # Exceptions
    "ConfigurationError",
]
