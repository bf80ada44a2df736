"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
different ID types (e.g., passing UserID where NotificationID expected).

Uses Literal aliases for the small closed vocabularies stored as text columns.
"""

from typing import Literal, NewType, TypeAlias

# ID types using NewType for type safety
UserID = NewType("UserID", str)
NotificationID = NewType("NotificationID", str)
DeliveryID = NewType("DeliveryID", str)
FamilyID = NewType("FamilyID", str)

# Closed vocabularies
Channel: TypeAlias = Literal["email", "sms"]
DeliveryStatus: TypeAlias = Literal["pending", "sent", "failed"]
ToneLabel: TypeAlias = Literal["negative", "neutral", "positive"]
SubscriptionStatus: TypeAlias = Literal[
    "active",
    "trialing",
    "past_due",
    "unpaid",
    "incomplete",
    "incomplete_expired",
    "paused",
    "cancelled",
]
CheckStatus: TypeAlias = Literal["pass", "warn", "fail"]
Severity: TypeAlias = Literal["low", "medium", "high", "critical"]

# Structural aliases
DateString: TypeAlias = str  # ISO 8601 format
