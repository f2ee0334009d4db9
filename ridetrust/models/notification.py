"""
Notification Model - In-app notifications raised by reputation decisions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from ridetrust.models.common import CamelModel


class NotificationType(str, Enum):
    """Type of notification."""

    RIDER_VERIFICATION_APPROVED = "rider_verification_approved"
    RIDER_VERIFICATION_REJECTED = "rider_verification_rejected"


class Notification(CamelModel):
    """
    Notification stored for the user's notification center.

    Fields:
    - notification_id: Unique UUID
    - user_id: Target user
    - type: Notification type for UI rendering
    - title: Notification title
    - body: Notification body
    - data: Additional data (e.g., verification note)
    - read: Whether user has read the notification
    """

    notification_id: str = Field(..., description="Unique notification ID")
    user_id: str = Field(..., description="Target user ID")
    type: NotificationType
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None
    read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
