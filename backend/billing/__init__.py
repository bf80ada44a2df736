"""Payment-provider webhook processing for family subscriptions."""

from .stripe_webhooks import process_stripe_event
from .webhook_signature import WebhookSignatureError, verify_stripe_signature

__all__ = ["process_stripe_event", "verify_stripe_signature", "WebhookSignatureError"]
