"""
Single-notification delivery with delivery-status tracking.

Every send attempt gets a row in notification_deliveries that moves from
'pending' to 'sent' or 'failed' once the provider has answered.
"""

from typing import Any

from models import DeliveryRecord, NotificationPayload, NotificationPreferences
from notifications.channels import ChannelProvider, DeliveryError, get_provider
from notifications.unsubscribe_tokens import build_unsubscribe_url
from shared.db import get_supabase_client
from shared.error_logger import log_handler_error
from shared.utils import utc_now_iso

CHANNEL_PREFERENCES = {
    "email": "notification_email",
    "sms": "notification_sms",
}


def is_channel_enabled(preferences: NotificationPreferences, channel: str) -> bool:
    """Check whether a user accepts notifications on a channel."""
    field = CHANNEL_PREFERENCES.get(channel)
    if field is None:
        return False
    return bool(getattr(preferences, field))


def deliver(
    supabase: Any,
    notification_id: str,
    channel: str,
    recipient: str,
    title: str,
    message: str,
    user_id: str | None = None,
    provider: ChannelProvider | None = None,
) -> dict[str, Any]:
    """
    Send one notification on one channel and track the attempt.

    Creates a pending delivery record, calls the channel provider, then writes
    the final status. Provider failures mark the record failed. Database errors,
    and an inserted row that is not a valid DeliveryRecord, propagate to the caller.

    Args:
        supabase: Supabase client
        notification_id: UUID of the notification being delivered
        channel: 'email' or 'sms'
        recipient: Email address or phone number
        title: Notification title (email subject)
        message: Notification body
        user_id: Owner of the notification, used for the opt-out link
        provider: Channel provider (defaults to get_provider(channel))

    Returns:
        Dictionary with delivery_id, channel, status, error, provider_message_id
    """
    provider = provider or get_provider(channel)

    pending_row = {
        "notification_id": notification_id,
        "channel": channel,
        "recipient": recipient,
        "status": "pending",
    }
    response = supabase.table("notification_deliveries").insert(pending_row).execute()
    if not response.data:
        raise RuntimeError(
            f"Failed to create delivery record for notification {notification_id}"
        )
    # The insert may echo only some columns
    delivery = DeliveryRecord.model_validate({**pending_row, **response.data[0]})
    delivery_id = delivery.id

    status = "sent"
    error_message: str | None = None
    provider_message_id: str | None = None

    unsubscribe_url = None
    if channel == "email" and user_id:
        unsubscribe_url = build_unsubscribe_url(user_id, channel)

    try:
        provider_message_id = provider.send(recipient, title, message, unsubscribe_url)
    except DeliveryError as e:
        status = "failed"
        error_message = str(e)
        print(f"  ✗ Failed to send {channel}: {error_message}")

    supabase.table("notification_deliveries").update(
        {
            "status": status,
            "sent_at": utc_now_iso() if status == "sent" else None,
            "error_message": error_message,
        }
    ).eq("id", delivery_id).execute()

    return {
        "delivery_id": delivery_id,
        "channel": channel,
        "status": status,
        "error": error_message,
        "provider_message_id": provider_message_id,
    }


def send_notification(
    payload: NotificationPayload, provider: ChannelProvider | None = None
) -> dict[str, Any]:
    """
    Deliver a notification on the requested channel if the user allows it.

    Args:
        payload: Validated notification request
        provider: Optional provider override (defaults to get_provider(channel))

    Returns:
        Dictionary with 'success' (bool) and either skip details, the delivery
        outcome (delivery_id, channel, status, error), or 'error' on failure
    """
    print(f"Processing {payload.channel} notification for user {payload.user_id}")

    try:
        supabase = get_supabase_client()

        profile_response = (
            supabase.table("profiles")
            .select("notification_email, notification_sms")
            .eq("user_id", payload.user_id)
            .limit(1)
            .execute()
        )
        if not profile_response.data:
            raise LookupError(f"Profile not found for user {payload.user_id}")

        preferences = NotificationPreferences.model_validate(profile_response.data[0])

        if not is_channel_enabled(preferences, payload.channel):
            print(
                f"  ⊘ User {payload.user_id} has {payload.channel} notifications disabled. Skipping."
            )
            return {
                "success": True,
                "skipped": True,
                "reason": f"{payload.channel} notifications disabled",
            }

        result = deliver(
            supabase,
            notification_id=payload.notification_id,
            channel=payload.channel,
            recipient=payload.recipient,
            title=payload.title,
            message=payload.message,
            user_id=payload.user_id,
            provider=provider,
        )

    except Exception as e:
        error_file = log_handler_error(
            error_type="delivery",
            error_message=str(e),
            context={
                "notification_id": payload.notification_id,
                "user_id": payload.user_id,
                "channel": payload.channel,
            },
        )
        print(f"  ✗ Send notification error. Details logged to: {error_file}")
        return {"success": False, "error": str(e)}

    if result["status"] == "sent":
        print(f"  ✓ Sent {payload.channel} notification {payload.notification_id}")

    return {
        "success": result["status"] == "sent",
        "delivery_id": result["delivery_id"],
        "channel": result["channel"],
        "status": result["status"],
        "error": result["error"],
    }
