#!/usr/bin/env python3
"""Check config.example.yaml (or a given file) against the configuration schema.

Only the YAML layer is validated; no environment variables are needed.
"""

import sys
from pathlib import Path

import yaml

from ticket_notifier.config.loader import validate_config_file
from ticket_notifier.config.validators import check_for_warnings


def verify_config_structure(config_file: Path) -> bool:
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return False

    if not validate_config_file(config_file):
        return False

    with open(config_file, "r") as f:
        config = yaml.safe_load(f) or {}

    for warning in check_for_warnings(config):
        print(f"  ! {warning}")

    schedule = config.get("schedule", {})
    queue = config.get("queue", {})
    print(f"  - Cron: {schedule.get('cron', 'default')}")
    print(f"  - Batch size: {queue.get('batch_size', 'default')}")
    return True


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("config.example.yaml")
    sys.exit(0 if verify_config_structure(path) else 1)
