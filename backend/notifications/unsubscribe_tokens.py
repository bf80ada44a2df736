"""
Token generation and validation for one-click channel opt-out links.

Uses cryptographically signed tokens with expiry for secure opt-out links.
Tokens are stateless (no database storage needed) and expire after 90 days.
Each token names one user and one channel (email or sms).
"""

import hashlib
import os
from typing import Any, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from shared.db import get_supabase_client

OPT_OUT_SALT = "channel-opt-out"
TOKEN_MAX_AGE_DAYS = 90

CHANNEL_PREFERENCE_COLUMNS = {
    "email": "notification_email",
    "sms": "notification_sms",
}


def _get_serializer() -> URLSafeTimedSerializer:
    """
    Get configured serializer for token generation and validation.

    Raises:
        ValueError: If UNSUBSCRIBE_SECRET_KEY environment variable not set
    """
    secret_key = os.getenv("UNSUBSCRIBE_SECRET_KEY")
    if not secret_key:
        raise ValueError("UNSUBSCRIBE_SECRET_KEY environment variable must be set.")

    return URLSafeTimedSerializer(
        secret_key,
        salt=OPT_OUT_SALT,
        signer_kwargs={"digest_method": hashlib.sha256},
    )


def generate_opt_out_token(user_id: str, channel: str) -> str:
    """
    Generate a signed opt-out token for one user and channel.

    Args:
        user_id: User's unique identifier (UUID)
        channel: 'email' or 'sms'

    Returns:
        URL-safe token string (format: payload.timestamp.signature)

    Raises:
        ValueError: If the channel is unknown or UNSUBSCRIBE_SECRET_KEY not configured
    """
    if channel not in CHANNEL_PREFERENCE_COLUMNS:
        raise ValueError(f"Unknown notification channel: {channel}")

    serializer = _get_serializer()
    return serializer.dumps({"user_id": user_id, "channel": channel})


def validate_opt_out_token(
    token: str, max_age_days: int = TOKEN_MAX_AGE_DAYS
) -> Optional[tuple[str, str]]:
    """
    Validate an opt-out token and extract the user_id and channel.

    Never raises exceptions - returns None for any invalid token.

    Returns:
        (user_id, channel) if the token is valid, None if invalid or expired
    """
    try:
        serializer = _get_serializer()
        data = serializer.loads(token, max_age=max_age_days * 24 * 60 * 60)
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None

    if not isinstance(data, dict):
        return None

    user_id = data.get("user_id")
    channel = data.get("channel")
    if not user_id or channel not in CHANNEL_PREFERENCE_COLUMNS:
        return None

    return user_id, channel


def build_unsubscribe_url(user_id: str, channel: str) -> str | None:
    """Opt-out link for a notification, or None when signing is not configured."""
    if not os.getenv("UNSUBSCRIBE_SECRET_KEY"):
        return None

    base_url = os.getenv("FRONTEND_BASE_URL", "https://coparent.app").rstrip("/")
    token = generate_opt_out_token(user_id, channel)
    return f"{base_url}/unsubscribe?token={token}"


def apply_opt_out(token: str) -> dict[str, Any]:
    """
    Turn off a notification channel for the user named in a token.

    Returns:
        Dictionary with 'success' (bool), plus 'user_id' and 'channel' on success
        or 'error' on failure
    """
    validated = validate_opt_out_token(token)
    if validated is None:
        return {"success": False, "error": "Invalid or expired token"}

    user_id, channel = validated
    supabase = get_supabase_client()
    supabase.table("profiles").update(
        {CHANNEL_PREFERENCE_COLUMNS[channel]: False}
    ).eq("user_id", user_id).execute()

    print(f"✓ Turned off {channel} notifications for user {user_id}")
    return {"success": True, "user_id": user_id, "channel": channel}
