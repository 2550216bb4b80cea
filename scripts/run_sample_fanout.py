#!/usr/bin/env python3
"""Sample fan-out harness for end-to-end validation.

Seeds subscribers, enqueues a handful of ticket updates and runs one worker
tick, without pytest. SMTP delivery is always patched out; the messages that
would have been sent are printed instead.

Two modes:

1. Fake store (default): an in-memory fakeredis server, no services needed
2. Real store: SAMPLE_REAL_REDIS=1 uses REDIS_URL from the environment

Usage:
    python scripts/run_sample_fanout.py
    python scripts/run_sample_fanout.py --updates 8 --batch-size 5
    SAMPLE_REAL_REDIS=1 python scripts/run_sample_fanout.py --config config.yaml
"""

import argparse
import os
import sys
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from ticket_notifier.config.environment import load_environment_config
from ticket_notifier.config.loader import load_config
from ticket_notifier.config.models import AppConfig
from ticket_notifier.logging.config import configure_logging
from ticket_notifier.service import NotificationPipeline
from ticket_notifier.subscriptions.models import SubscriberSetKind

SAMPLE_TICKET_ID = 42
SAMPLE_FOLLOWERS = ["alice@example.com", "bob@example.com", "carol@example.com"]
SAMPLE_OPTED_IN = ["alice@example.com", "carol@example.com"]


def print_header(title: str):
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary_table(result, pending: int):
    print_header("Tick Summary")

    metrics = [
        ("Jobs Processed", result.jobs_processed),
        ("Malformed Jobs", result.jobs_failed),
        ("Messages Sent", result.messages_sent),
        ("Send Failures", result.send_failures),
        ("Cutoff Reached", "Yes" if result.cutoff_reached else "No"),
        ("Aborted", "Yes" if result.aborted else "No"),
        ("Still Queued", pending),
        ("Duration (seconds)", f"{result.duration_seconds:.3f}"),
    ]

    label_width = max(len(label) for label, _ in metrics)

    print("┌" + "─" * (label_width + 2) + "┬" + "─" * 22 + "┐")
    print(f"│ {'Metric':<{label_width}} │ {'Value':<20} │")
    print("├" + "─" * (label_width + 2) + "┼" + "─" * 22 + "┤")
    for label, value in metrics:
        print(f"│ {label:<{label_width}} │ {str(value):<20} │")
    print("└" + "─" * (label_width + 2) + "┴" + "─" * 22 + "┘")


def main():
    parser = argparse.ArgumentParser(
        description="Run a sample ticket update fan-out",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (defaults apply when omitted)",
    )
    parser.add_argument("--updates", type=int, default=3, help="Updates to enqueue (default: 3)")
    parser.add_argument("--batch-size", type=int, default=None, help="Override queue.batch_size")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)",
    )
    args = parser.parse_args()

    load_dotenv()
    use_real_store = os.environ.get("SAMPLE_REAL_REDIS", "0") == "1"

    print_header("Ticket Notifier - Sample Fan-out Harness")

    if not use_real_store:
        # Placeholders so environment validation passes; nothing connects to them
        os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
        os.environ.setdefault("SMTP_HOST", "smtp.example.com")
        os.environ.setdefault("SMTP_PORT", "587")

    try:
        if args.config:
            app_config, env_config = load_config(args.config)
        else:
            app_config, env_config = AppConfig(), load_environment_config()

        if args.batch_size:
            app_config.queue.batch_size = args.batch_size

        configure_logging(
            level=args.log_level,
            format_type=app_config.logging.format,
            environment="validation",
        )

        client = None
        if use_real_store:
            print(f"⚠️  Real store mode: writing to {env_config.redis_url}")
        else:
            import fakeredis

            client = fakeredis.FakeRedis(decode_responses=True)
            print("Using an in-memory fake store")

        pipeline = NotificationPipeline.from_config(app_config, env_config, client=client)

        print("\n👥 Seeding subscribers...")
        for address in SAMPLE_FOLLOWERS:
            pipeline.subscribe_to_ticket(SAMPLE_TICKET_ID, address)
        futures = [
            pipeline.set_membership(SubscriberSetKind.TICKET_UPDATE, address, True)
            for address in SAMPLE_OPTED_IN
        ]
        for future in futures:
            future.result()
        print(f"✓ {len(SAMPLE_FOLLOWERS)} followers, {len(SAMPLE_OPTED_IN)} opted in")

        print(f"\n📨 Enqueueing {args.updates} update(s) for ticket {SAMPLE_TICKET_ID}...")
        for n in range(1, args.updates + 1):
            pipeline.enqueue_ticket_update(
                SAMPLE_TICKET_ID,
                subject=f"Ticket #{SAMPLE_TICKET_ID} updated ({n})",
                body=f"Sample update number {n}.",
            )

        print("\n🚀 Running one worker tick...")
        with patch("ticket_notifier.notifications.smtp_client.SMTPClient.send") as mock_send:
            result = pipeline.run_tick()

        print_summary_table(result, pipeline.queue.pending_count())

        print_header("Messages That Would Have Been Sent")
        for call in mock_send.call_args_list:
            message = call.args[0]
            print(f"To: {message['To']:<24} Subject: {message['Subject']}")

        pipeline.close()
        return 1 if result.had_errors else 0

    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
