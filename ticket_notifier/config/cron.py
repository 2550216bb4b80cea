"""Cron expression parsing for the batch worker schedule.

Two dialects are accepted:

- standard 5-field crontab: ``minute hour day month day_of_week``
- Quartz-style 6-field with leading seconds:
  ``second minute hour day month day_of_week`` (e.g. ``0 */5 * ? * *``)

Quartz's ``?`` ("no specific value") is treated as ``*``, and Quartz numeric
weekdays (1=SUN .. 7=SAT) are translated to day names so APScheduler's
Monday-based numbering never applies to them.
"""

import re
from typing import Dict, Optional

from apscheduler.triggers.cron import CronTrigger
from apscheduler.util import astimezone

DEFAULT_CRON_EXPRESSION = "0 */5 * ? * *"

QUARTZ_WEEKDAYS = {
    1: "sun",
    2: "mon",
    3: "tue",
    4: "wed",
    5: "thu",
    6: "fri",
    7: "sat",
}

_QUARTZ_FIELDS = ("second", "minute", "hour", "day", "month", "day_of_week")
_CRONTAB_FIELDS = ("minute", "hour", "day", "month", "day_of_week")


class CronParseError(ValueError):
    """Raised when a cron expression cannot be turned into a trigger."""

    pass


def split_cron_expression(expression: str) -> Dict[str, str]:
    """
    Split a cron expression into named APScheduler fields.

    Args:
        expression: 5- or 6-field cron expression

    Returns:
        Mapping of APScheduler CronTrigger keyword -> field expression

    Raises:
        CronParseError: If the expression has the wrong number of fields

    Examples:
        >>> split_cron_expression("0 */5 * ? * *")["minute"]
        '*/5'
        >>> split_cron_expression("*/5 * * * *")["second"]
        '0'
    """
    if not isinstance(expression, str) or not expression.strip():
        raise CronParseError("Cron expression cannot be empty")

    parts = expression.split()

    if len(parts) == 6:
        fields = dict(zip(_QUARTZ_FIELDS, parts))
        fields["day_of_week"] = _translate_quartz_weekdays(fields["day_of_week"])
    elif len(parts) == 5:
        fields = dict(zip(_CRONTAB_FIELDS, parts))
        fields["second"] = "0"
    else:
        raise CronParseError(
            f"Invalid cron expression '{expression}': expected 5 or 6 fields, got {len(parts)}"
        )

    for name in ("day", "day_of_week"):
        if fields[name] == "?":
            fields[name] = "*"

    if "?" in "".join(fields.values()):
        raise CronParseError(
            f"Invalid cron expression '{expression}': '?' is only allowed as a whole day field"
        )

    return fields


def build_cron_trigger(expression: str, timezone: Optional[str] = "UTC") -> CronTrigger:
    """
    Build an APScheduler CronTrigger from a cron expression.

    Args:
        expression: 5- or 6-field cron expression
        timezone: Timezone the expression is evaluated in

    Returns:
        Configured CronTrigger

    Raises:
        CronParseError: If the expression is malformed or has out-of-range values
    """
    fields = split_cron_expression(expression)

    try:
        return CronTrigger(timezone=timezone, **fields)
    except ValueError as e:
        raise CronParseError(f"Invalid cron expression '{expression}': {e}") from e


def _translate_quartz_weekdays(field: str) -> str:
    if field in ("*", "?"):
        return field

    # Only the range part before a step ("2-6/2") names weekdays
    base, sep, step = field.partition("/")

    def replace(match: "re.Match[str]") -> str:
        number = int(match.group(0))
        if number not in QUARTZ_WEEKDAYS:
            raise CronParseError(
                f"Invalid day_of_week value {number}: Quartz weekdays run from 1 (SUN) to 7 (SAT)"
            )
        return QUARTZ_WEEKDAYS[number]

    return re.sub(r"\d+", replace, base) + sep + step


def validate_timezone(name: str) -> str:
    """
    Check that APScheduler can resolve a timezone name.

    Raises:
        ValueError: If the zone is unknown
    """
    try:
        astimezone(name)
    except (KeyError, ValueError, TypeError) as e:
        raise ValueError(f"Unknown timezone '{name}'") from e
    return name
