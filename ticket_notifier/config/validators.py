"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

from .cron import CronParseError, split_cron_expression


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Look for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    queue = config_dict.get("queue", {})
    if isinstance(queue, dict):
        batch_size = queue.get("batch_size", 5)
        if isinstance(batch_size, int) and batch_size > 100:
            warning_messages.append(
                f"Large queue.batch_size ({batch_size}) lets a single tick run for a long time"
            )

        job_ttl = queue.get("job_ttl_seconds")
        if job_ttl == 0:
            warning_messages.append(
                "queue.job_ttl_seconds is 0: orphaned job hashes will never expire"
            )

    schedule = config_dict.get("schedule", {})
    if isinstance(schedule, dict) and isinstance(schedule.get("cron"), str):
        try:
            fields = split_cron_expression(schedule["cron"])
        except CronParseError:
            # Reported as a hard error by model validation
            fields = {}
        if fields.get("second") == "*" or fields.get("minute") == "*":
            warning_messages.append(
                f"Cron expression '{schedule['cron']}' fires more than once a minute"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
