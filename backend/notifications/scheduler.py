"""
Event-based notification scheduling.

Asks the database to create notifications for upcoming events, then fans the
freshly created ones out to each user's enabled email/SMS channels.
"""

import re
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, cast

from models import NotificationPreferences
from notifications.channels import ChannelProvider
from notifications.delivery import deliver
from shared.db import get_supabase_client
from shared.error_logger import log_handler_error
from shared.utils import parse_date_string, utc_now_iso

DEFAULT_HOURS_AHEAD = 24
DEFAULT_LOOKBACK_MINUTES = 5

# Notification category -> profile preference that gates it
CATEGORY_PREFERENCES = {
    "calendar": "notification_calendar",
    "expense": "notification_expenses",
    "message": "notification_messages",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_hours_ahead(body: Any) -> int:
    """
    Read hours_ahead from a scheduler request body.

    A truthy value is read as a leading integer ("12", 12, "12h" -> 12).
    Missing, non-numeric, or non-positive values fall back to the default.
    """
    if not isinstance(body, dict):
        return DEFAULT_HOURS_AHEAD

    value = body.get("hours_ahead")
    if not value:
        return DEFAULT_HOURS_AHEAD

    match = _LEADING_INT.match(str(value))
    if not match:
        return DEFAULT_HOURS_AHEAD

    hours = int(match.group(1))
    return hours if hours > 0 else DEFAULT_HOURS_AHEAD


def _window_start(since: str | None, lookback_minutes: int) -> str:
    if since:
        parsed = parse_date_string(since)
        if parsed is None:
            raise ValueError(f"Could not parse window start: {since}")
        return parsed
    start = datetime.now(timezone.utc) - timedelta(minutes=lookback_minutes)
    return start.isoformat()


def _fetch_recent_notifications(
    supabase: Any, categories: list[str], window_start: str
) -> list[dict[str, Any]]:
    """Notifications created since window_start, newest first. Errors yield []."""
    try:
        response = (
            supabase.table("notifications")
            .select("id, user_id, title, message, category")
            .in_("category", categories)
            .gte("created_at", window_start)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        error_file = log_handler_error(
            error_type="scheduler",
            error_message=f"Error fetching recent notifications: {e}",
            context={"categories": categories, "window_start": window_start},
        )
        print(f"  ⚠️  Could not fetch recent notifications. Details logged to: {error_file}")
        return []

    return cast(list[dict[str, Any]], response.data or [])


def _already_delivered(supabase: Any, notification_id: str) -> bool:
    response = (
        supabase.table("notification_deliveries")
        .select("id")
        .eq("notification_id", notification_id)
        .limit(1)
        .execute()
    )
    return bool(response.data)


def _load_preferences(supabase: Any, user_id: str) -> NotificationPreferences | None:
    response = (
        supabase.table("profiles")
        .select(
            "email, phone, notification_email, notification_sms, "
            "notification_calendar, notification_expenses, notification_messages"
        )
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return NotificationPreferences.model_validate(response.data[0])


def _enabled_targets(preferences: NotificationPreferences) -> list[tuple[str, str]]:
    """(channel, recipient) pairs the user accepts and can be reached on."""
    targets = []
    if preferences.notification_email and preferences.email:
        targets.append(("email", preferences.email))
    if preferences.notification_sms and preferences.phone:
        targets.append(("sms", preferences.phone))
    return targets


def _process_notification(
    supabase: Any,
    notification: dict[str, Any],
    stats: dict[str, int],
    dry_run: bool,
    providers: dict[str, ChannelProvider],
) -> None:
    """Send one notification on each channel its owner accepts."""
    if _already_delivered(supabase, notification["id"]):
        return

    preferences = _load_preferences(supabase, notification["user_id"])
    if preferences is None:
        print(f"  ⚠️  Profile not found for user {notification['user_id']}, skipping")
        return

    category_field = CATEGORY_PREFERENCES.get(notification.get("category", ""))
    if not category_field or not getattr(preferences, category_field):
        return

    for channel, recipient in _enabled_targets(preferences):
        if dry_run:
            print(f"  [DRY RUN] Would send {channel} to user {notification['user_id']}")
            stats["sent"] += 1
            continue

        result = deliver(
            supabase,
            notification_id=notification["id"],
            channel=channel,
            recipient=recipient,
            title=notification["title"],
            message=notification["message"],
            user_id=notification["user_id"],
            provider=providers.get(channel),
        )
        stats[result["status"]] += 1


def run_notification_scheduler(
    hours_ahead: int = DEFAULT_HOURS_AHEAD,
    categories: Iterable[str] = ("calendar",),
    lookback_minutes: int = DEFAULT_LOOKBACK_MINUTES,
    since: str | None = None,
    dry_run: bool = False,
    providers: dict[str, ChannelProvider] | None = None,
) -> dict[str, Any]:
    """
    Create notifications for upcoming events and send them out.

    Args:
        hours_ahead: Look-ahead window for notify_upcoming_events
        categories: Notification categories to fan out
        lookback_minutes: How far back "freshly created" reaches
        since: Explicit window start (any parseable date), overrides lookback_minutes
        dry_run: If True, count deliveries without writing rows or sending
        providers: Optional channel -> provider overrides

    Returns:
        Dictionary with 'success' plus notifications_created, deliveries_sent,
        deliveries_failed, errors (notifications that raised and were skipped),
        hours_ahead, timestamp; or 'error' on failure
    """
    categories = list(categories)
    providers = providers or {}

    print(f"Running notification scheduler for events in next {hours_ahead} hours")

    try:
        supabase = get_supabase_client()

        rpc_response = supabase.rpc(
            "notify_upcoming_events", {"hours_ahead": hours_ahead}
        ).execute()
        notifications_created = rpc_response.data or 0
        print(f"✓ Created {notifications_created} notifications for upcoming events")

        recent = _fetch_recent_notifications(
            supabase, categories, _window_start(since, lookback_minutes)
        )

        stats = {"sent": 0, "failed": 0, "errors": 0}

        for notification in recent:
            try:
                _process_notification(supabase, notification, stats, dry_run, providers)
            except Exception as e:
                error_file = log_handler_error(
                    error_type="scheduler",
                    error_message=str(e),
                    context={
                        "notification_id": notification.get("id"),
                        "user_id": notification.get("user_id"),
                    },
                )
                print(
                    f"  ✗ Error processing notification {notification.get('id')}. "
                    f"Details logged to: {error_file}"
                )
                stats["errors"] += 1

    except Exception as e:
        error_file = log_handler_error(
            error_type="scheduler",
            error_message=str(e),
            context={"hours_ahead": hours_ahead, "categories": categories},
        )
        print(f"  ✗ Notification scheduler error. Details logged to: {error_file}")
        return {"success": False, "error": str(e)}

    return {
        "success": True,
        "notifications_created": notifications_created,
        "deliveries_sent": stats["sent"],
        "deliveries_failed": stats["failed"],
        "errors": stats["errors"],
        "hours_ahead": hours_ahead,
        "timestamp": utc_now_iso(),
    }
