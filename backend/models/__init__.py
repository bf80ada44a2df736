"""Pydantic models for data validation and type checking."""

from models.billing import SubscriptionUpdate
from models.moderation import ToneAnalysis
from models.notification import (
    DeliveryRecord,
    NotificationPayload,
    NotificationPreferences,
)
from models.scan import ScanCheck, SecurityFinding

__all__ = [
    "NotificationPayload",
    "NotificationPreferences",
    "DeliveryRecord",
    "ToneAnalysis",
    "SubscriptionUpdate",
    "ScanCheck",
    "SecurityFinding",
]
