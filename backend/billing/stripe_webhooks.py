"""
Stripe webhook event processing.

Each event is recorded in audit_logs, then matched on its type and applied
to the family's row in subscriptions.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from models import SubscriptionUpdate
from shared.db import get_supabase_client
from shared.error_logger import log_handler_error
from shared.utils import unix_to_iso

SUBSCRIPTION_PERIOD_DAYS = 30
DEFAULT_PLAN_TYPE = "monthly"

# Stripe spells it "canceled"; subscription rows use "cancelled"
STATUS_ALIASES = {"canceled": "cancelled"}


def normalize_status(status: str) -> str:
    return STATUS_ALIASES.get(status, status)


def _update_by_subscription_id(
    supabase: Any, stripe_subscription_id: str, update: SubscriptionUpdate
) -> None:
    supabase.table("subscriptions").update(update.to_row()).eq(
        "stripe_subscription_id", stripe_subscription_id
    ).execute()


def _handle_checkout_completed(supabase: Any, session: dict[str, Any]) -> None:
    print(f"  Checkout session completed: {session.get('id')}")

    metadata = session.get("metadata") or {}
    family_id = metadata.get("family_id")
    if not family_id:
        print("  ⚠️  Checkout session has no family_id, nothing to update")
        return

    now = datetime.now(timezone.utc)
    update = SubscriptionUpdate(
        family_id=family_id,
        stripe_customer_id=session.get("customer"),
        stripe_subscription_id=session.get("subscription"),
        plan_type=metadata.get("plan_type") or DEFAULT_PLAN_TYPE,
        status="active",
        current_period_start=now.isoformat(),
        current_period_end=(now + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)).isoformat(),
    )
    supabase.table("subscriptions").upsert(
        update.to_row(), on_conflict="family_id"
    ).execute()


def _handle_subscription_updated(supabase: Any, subscription: dict[str, Any]) -> None:
    print(f"  Subscription updated: {subscription['id']}")

    update = SubscriptionUpdate(
        status=normalize_status(subscription["status"]),
        current_period_start=unix_to_iso(subscription.get("current_period_start")),
        current_period_end=unix_to_iso(subscription.get("current_period_end")),
    )
    _update_by_subscription_id(supabase, subscription["id"], update)


def _handle_subscription_deleted(supabase: Any, subscription: dict[str, Any]) -> None:
    print(f"  Subscription deleted: {subscription['id']}")
    _update_by_subscription_id(
        supabase, subscription["id"], SubscriptionUpdate(status="cancelled")
    )


def _handle_invoice_paid(supabase: Any, invoice: dict[str, Any]) -> None:
    print(f"  Invoice paid: {invoice.get('id')}")
    if invoice.get("subscription"):
        _update_by_subscription_id(
            supabase, invoice["subscription"], SubscriptionUpdate(status="active")
        )


def _handle_invoice_payment_failed(supabase: Any, invoice: dict[str, Any]) -> None:
    print(f"  Invoice payment failed: {invoice.get('id')}")
    if invoice.get("subscription"):
        _update_by_subscription_id(
            supabase, invoice["subscription"], SubscriptionUpdate(status="past_due")
        )


def _handle_issuing_card_created(supabase: Any, card: dict[str, Any]) -> None:
    print(f"  Issuing card created: {card.get('id')}")


def _handle_issuing_transaction_created(
    supabase: Any, transaction: dict[str, Any]
) -> None:
    print(f"  Issuing transaction: {transaction.get('id')}")


EVENT_HANDLERS: dict[str, Callable[[Any, dict[str, Any]], None]] = {
    "checkout.session.completed": _handle_checkout_completed,
    "customer.subscription.updated": _handle_subscription_updated,
    "customer.subscription.deleted": _handle_subscription_deleted,
    "invoice.paid": _handle_invoice_paid,
    "invoice.payment_failed": _handle_invoice_payment_failed,
    "issuing_card.created": _handle_issuing_card_created,
    "issuing_transaction.created": _handle_issuing_transaction_created,
}


def process_stripe_event(event: dict[str, Any]) -> dict[str, Any]:
    """
    Apply one Stripe webhook event.

    Args:
        event: Parsed webhook body with 'type' and 'data.object'

    Returns:
        {'received': True, 'type': ..., 'handled': bool} on success,
        {'error': message} if processing failed

    Raises:
        ValueError: If the event has no type
    """
    event_type = event.get("type") if isinstance(event, dict) else None
    if not event_type:
        raise ValueError("Event type is required")

    print(f"Received Stripe webhook: {event_type}")

    try:
        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise ValueError(f"Event {event_type} has a malformed data field")
        event_object = data.get("object")

        supabase = get_supabase_client()

        supabase.table("audit_logs").insert(
            {
                "action": "stripe_webhook",
                "entity_type": "stripe_event",
                "entity_id": (event_object or {}).get("id"),
                "new_values": {"event_type": event_type, "data": event_object},
            }
        ).execute()

        handler = EVENT_HANDLERS.get(event_type)
        if handler is None:
            print(f"  Unhandled event type: {event_type}")
        else:
            if not isinstance(event_object, dict):
                raise ValueError(f"Event {event_type} has no data object")
            handler(supabase, event_object)

    except Exception as e:
        error_file = log_handler_error(
            error_type="stripe_webhook",
            error_message=str(e),
            context={"event_type": event_type, "event_id": event.get("id")},
        )
        print(f"  ✗ Webhook error. Details logged to: {error_file}")
        return {"error": str(e)}

    return {"received": True, "type": event_type, "handled": handler is not None}
