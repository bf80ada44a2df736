"""
Notification delivery for the co-parenting app.

This module handles:
- Creating notifications for upcoming calendar events (scheduler)
- Sending single notifications over email/SMS with preference gating
- Tracking each send attempt as a delivery record
- One-click channel opt-out links
"""

from .delivery import deliver, send_notification
from .scheduler import run_notification_scheduler

__all__ = [
    "deliver",
    "send_notification",
    "run_notification_scheduler",
]
