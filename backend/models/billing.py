"""Pydantic models for subscription billing state."""

from pydantic import BaseModel

from models.types import DateString, FamilyID, SubscriptionStatus


class SubscriptionUpdate(BaseModel):
    """Subscription row fields a payment webhook may write."""

    family_id: FamilyID | None = None
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    plan_type: str | None = None
    status: SubscriptionStatus | None = None
    current_period_start: DateString | None = None
    current_period_end: DateString | None = None

    def to_row(self) -> dict[str, str]:
        """Only the fields the event actually carries."""
        return self.model_dump(exclude_none=True)
