"""Main entry point for the ticket notifier service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from ticket_notifier.config.environment import EnvironmentConfig
from ticket_notifier.config.exceptions import ConfigurationError
from ticket_notifier.config.loader import load_config
from ticket_notifier.config.models import AppConfig
from ticket_notifier.logging import get_logger
from ticket_notifier.logging.config import configure_logging
from ticket_notifier.scheduler import SchedulerService
from ticket_notifier.service import NotificationPipeline
from ticket_notifier.store.connection import redact_url

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > environment > config file > INFO.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ticket-notifier",
        description="Ticket notifier - batched email fan-out of ticket updates",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--manual-run",
        action="store_true",
        help="Run a single worker tick immediately and exit",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the ticket notifier.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    pipeline = None

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        log_format = app_config.logging.format if app_config.logging else "key-value"
        environment = os.environ.get("ENVIRONMENT", "local")
        configure_logging(
            level=env_config.log_level, format_type=log_format, environment=environment
        )

        logger.info(
            "Ticket notifier starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
            },
        )
        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "redis_url": redact_url(env_config.redis_url),
                "cron": app_config.schedule.cron,
                "batch_size": app_config.queue.batch_size,
                "log_format": log_format,
            },
        )

        pipeline = NotificationPipeline.from_config(app_config, env_config)

        if args.manual_run:
            logger.info("Executing manual tick", extra={"event": "service.manual_run.starting"})
            result = pipeline.run_tick()

            logger.info(
                f"Manual tick completed: {result.jobs_processed} job(s), "
                f"{result.messages_sent} sent, {result.send_failures} failed sends",
                extra={
                    "event": "service.manual_run.completed",
                    "duration_seconds": result.duration_seconds,
                    "had_errors": result.had_errors,
                    "cutoff_reached": result.cutoff_reached,
                },
            )
            _stop(pipeline, start_time)
            return 1 if result.had_errors else 0

        shutdown_event = threading.Event()
        scheduler_service = SchedulerService(
            tick_callable=pipeline.run_tick,
            cron_expression=app_config.schedule.cron,
            timezone_name=app_config.schedule.timezone,
            run_on_startup=app_config.schedule.run_on_startup,
            shutdown_event=shutdown_event,
        )

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, shutting down",
                extra={"event": "service.signal_received", "signal": signum},
            )
            scheduler_service.shutdown(wait=False)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        scheduler_service.start()
        logger.info(
            "Scheduler started. Press Ctrl+C to stop",
            extra={"event": "service.daemon_mode.started"},
        )

        try:
            shutdown_event.wait()
        except KeyboardInterrupt:
            logger.info(
                "Keyboard interrupt received, shutting down",
                extra={"event": "service.keyboard_interrupt"},
            )
            scheduler_service.shutdown(wait=False)

        _stop(pipeline, start_time)
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        if pipeline is not None:
            pipeline.close()
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        if pipeline is not None:
            pipeline.close()
        return 1


def _stop(pipeline: NotificationPipeline, start_time: float) -> None:
    pipeline.close()
    logger.info(
        "Ticket notifier stopped",
        extra={
            "event": "service.stopping",
            "uptime_seconds": round(time.time() - start_time, 2),
        },
    )


if __name__ == "__main__":
    sys.exit(main())
