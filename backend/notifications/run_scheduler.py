"""
CLI script for running the notification scheduler.

Usage:
    # Notify about calendar events in the next 24 hours
    uv run python -m notifications.run_scheduler

    # Custom look-ahead and categories
    uv run python -m notifications.run_scheduler --hours-ahead 48 --category calendar --category expense

    # Re-send everything created since a given time
    uv run python -m notifications.run_scheduler --since "2026-10-17 08:00"

    # Dry run (don't actually send)
    uv run python -m notifications.run_scheduler --dry-run
"""

import argparse
import sys

from notifications.scheduler import (
    CATEGORY_PREFERENCES,
    DEFAULT_HOURS_AHEAD,
    DEFAULT_LOOKBACK_MINUTES,
    run_notification_scheduler,
)
from shared.utils import print_summary


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Create and send notifications for upcoming events"
    )

    parser.add_argument(
        "--hours-ahead",
        type=int,
        default=DEFAULT_HOURS_AHEAD,
        help="Look-ahead window for upcoming events (default: 24)",
    )

    parser.add_argument(
        "--category",
        action="append",
        choices=sorted(CATEGORY_PREFERENCES),
        help="Notification category to send (repeatable, default: calendar)",
    )

    parser.add_argument(
        "--lookback-minutes",
        type=int,
        default=DEFAULT_LOOKBACK_MINUTES,
        help="Send notifications created within this many minutes (default: 5)",
    )

    parser.add_argument(
        "--since",
        type=str,
        help="Send notifications created since this date/time (overrides --lookback-minutes)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't write delivery records or send)",
    )

    args = parser.parse_args(argv)

    if args.hours_ahead <= 0:
        parser.error("--hours-ahead must be positive")

    result = run_notification_scheduler(
        hours_ahead=args.hours_ahead,
        categories=args.category or ["calendar"],
        lookback_minutes=args.lookback_minutes,
        since=args.since,
        dry_run=args.dry_run,
    )

    if not result["success"]:
        print(f"✗ Scheduler failed: {result['error']}")
        return 1

    print_summary(
        "Notification Scheduler Complete",
        {
            "notifications_created": result["notifications_created"],
            "deliveries_sent": result["deliveries_sent"],
            "deliveries_failed": result["deliveries_failed"],
            "errors": result.get("errors", 0),
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
