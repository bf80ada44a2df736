"""
Stripe webhook signature verification.

Stripe signs each delivery with a header of the form
``t=<unix timestamp>,v1=<hex hmac>[,v1=...]``. The HMAC-SHA256 is computed
over ``"<timestamp>.<raw body>"`` with the endpoint's signing secret.
"""

import hashlib
import hmac
import time

# Maximum age of a webhook in seconds (5 minutes)
DEFAULT_TOLERANCE_SECONDS = 300


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails."""


def compute_signature(secret: str, timestamp: str, payload: bytes) -> str:
    """HMAC-SHA256 hex digest of the signed payload."""
    signed_payload = timestamp.encode("utf-8") + b"." + payload
    return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()


def _parse_header(header: str) -> tuple[str | None, list[str]]:
    timestamp = None
    signatures = []
    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)
    return timestamp, signatures


def verify_stripe_signature(
    payload: bytes,
    header: str | None,
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> None:
    """
    Verify a Stripe-Signature header against the raw request body.

    Args:
        payload: Raw request body bytes
        header: Value of the Stripe-Signature header
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum accepted age of the timestamp in seconds
        now: Current Unix time (defaults to time.time())

    Raises:
        WebhookSignatureError: If the header is missing or malformed, the
            timestamp is outside the tolerance, or no v1 signature matches
    """
    if not header:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    timestamp, signatures = _parse_header(header)
    if not timestamp or not signatures:
        raise WebhookSignatureError("Malformed Stripe-Signature header")

    try:
        timestamp_value = int(timestamp)
    except ValueError:
        raise WebhookSignatureError("Invalid timestamp in Stripe-Signature header")

    current = time.time() if now is None else now
    if abs(current - timestamp_value) > tolerance:
        raise WebhookSignatureError("Webhook timestamp outside tolerance")

    expected = compute_signature(secret, timestamp, payload)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise WebhookSignatureError("No matching signature found")
