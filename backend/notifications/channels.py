"""
Delivery providers for the email and SMS notification channels.

Mock providers simulate the upstream APIs (latency, occasional failure) and
are the default. Email goes through Resend when RESEND_API_KEY is set.
"""

import os
import random
import string
import time
from typing import Any, Protocol

import resend

from notifications.email_content import (
    build_notification_html,
    build_notification_text,
)

NOTIFICATION_FROM_EMAIL = os.getenv(
    "NOTIFICATION_FROM_EMAIL", "notifications@coparent.app"
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


class DeliveryError(Exception):
    """Raised when a provider could not deliver a message."""


class ChannelProvider(Protocol):
    channel: str

    def send(
        self,
        recipient: str,
        title: str,
        message: str,
        unsubscribe_url: str | None = None,
    ) -> str: ...


def _mock_message_id(prefix: str, rng: random.Random) -> str:
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


class MockEmailProvider:
    """Simulated email API with network delay and a 5% failure rate."""

    channel = "email"

    def __init__(
        self,
        failure_rate: float = 0.05,
        delay_seconds: float = 0.5,
        rng: random.Random | None = None,
    ):
        self.failure_rate = failure_rate
        self.delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    def send(
        self,
        recipient: str,
        title: str,
        message: str,
        unsubscribe_url: str | None = None,
    ) -> str:
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        print(f"[MOCK EMAIL] Sending to: {recipient}")
        print(f"[MOCK EMAIL] Subject: {title}")
        print(f"[MOCK EMAIL] Body: {message}")

        if self.rng.random() < self.failure_rate:
            raise DeliveryError("Mock email delivery failed (simulated failure)")

        message_id = _mock_message_id("mock_email", self.rng)
        print(f"[MOCK EMAIL] ✓ Sent successfully. Message ID: {message_id}")
        return message_id


class MockSMSProvider:
    """Simulated SMS API with network delay and a 2% failure rate."""

    channel = "sms"

    def __init__(
        self,
        failure_rate: float = 0.02,
        delay_seconds: float = 0.3,
        rng: random.Random | None = None,
    ):
        self.failure_rate = failure_rate
        self.delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    def send(
        self,
        recipient: str,
        title: str,
        message: str,
        unsubscribe_url: str | None = None,
    ) -> str:
        # SMS carries the message only
        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        print(f"[MOCK SMS] Sending to: {recipient}")
        print(f"[MOCK SMS] Body: {message}")

        if self.rng.random() < self.failure_rate:
            raise DeliveryError("Mock SMS delivery failed (simulated failure)")

        sid = _mock_message_id("mock_sms", self.rng)
        print(f"[MOCK SMS] ✓ Sent successfully. SID: {sid}")
        return sid


class ResendEmailProvider:
    """Email delivery through the Resend API."""

    channel = "email"

    def __init__(self, api_key: str, from_email: str = NOTIFICATION_FROM_EMAIL):
        resend.api_key = api_key
        self.from_email = from_email

    def send(
        self,
        recipient: str,
        title: str,
        message: str,
        unsubscribe_url: str | None = None,
    ) -> str:
        params: dict[str, Any] = {
            "from": f"Co-Parent Notifications <{self.from_email}>",
            "to": recipient,
            "subject": title,
            "html": build_notification_html(title, message, unsubscribe_url),
            "text": build_notification_text(title, message, unsubscribe_url),
        }
        if unsubscribe_url:
            params["headers"] = {
                "List-Unsubscribe": f"<{unsubscribe_url}>",
                "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
            }

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise DeliveryError(f"Resend delivery failed: {e}") from e

        email_id = response.get("id") if response else None
        if not email_id:
            raise DeliveryError("Resend returned no email id")
        return str(email_id)


def get_provider(channel: str) -> ChannelProvider:
    """
    Select the provider for a channel.

    Args:
        channel: 'email' or 'sms'

    Returns:
        Resend for email when RESEND_API_KEY is set, otherwise the mock provider

    Raises:
        ValueError: For an unknown channel
    """
    if channel == "email":
        api_key = os.getenv("RESEND_API_KEY")
        if api_key:
            return ResendEmailProvider(api_key)
        return MockEmailProvider()
    if channel == "sms":
        return MockSMSProvider()
    raise ValueError(f"Unknown notification channel: {channel}")
