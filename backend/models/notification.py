"""Pydantic models for notification delivery."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.types import (
    Channel,
    DeliveryID,
    DeliveryStatus,
    NotificationID,
    UserID,
)


class NotificationPayload(BaseModel):
    """Request body for sending one notification on one channel."""

    model_config = ConfigDict(str_strip_whitespace=True)

    notification_id: NotificationID
    user_id: UserID
    title: str
    message: str
    channel: Channel
    recipient: str = Field(..., min_length=1)  # email address or phone number


class NotificationPreferences(BaseModel):
    """Notification settings stored on a user's profile row."""

    email: str | None = None
    phone: str | None = None
    notification_email: bool = False
    notification_sms: bool = False
    notification_calendar: bool = False
    notification_expenses: bool = False
    notification_messages: bool = False

    @field_validator(
        "notification_email",
        "notification_sms",
        "notification_calendar",
        "notification_expenses",
        "notification_messages",
        mode="before",
    )
    @classmethod
    def _null_is_disabled(cls, value: bool | None) -> bool:
        return bool(value)


class DeliveryRecord(BaseModel):
    """One send attempt of a notification on a channel."""

    id: DeliveryID
    notification_id: NotificationID
    channel: Channel
    recipient: str
    status: DeliveryStatus
    sent_at: datetime | None = None
    error_message: str | None = None
