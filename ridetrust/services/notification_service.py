"""
Notification Service - In-app notifications for reputation decisions.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError
from ridetrust.models.notification import Notification, NotificationType
from ridetrust.utils.timezone_utils import utc_now


logger = logging.getLogger(__name__)


class NotificationService:
    """
    Stores notifications for the user's notification center.

    Delivery (push, email) belongs to a separate subsystem that reads this
    collection.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.notifications

    async def send_notification(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            notification_id=str(uuid.uuid4()),
            user_id=user_id,
            type=notification_type,
            title=title,
            body=body,
            data=data,
            read=False,
            created_at=utc_now(),
        )

        try:
            await self.collection.insert_one(notification.to_document())
        except PyMongoError as e:
            logger.error(f"Failed to store notification for {user_id}: {e}")
            raise InternalError(f"Failed to send notification: {e}") from e

        return notification

    async def notify_rider_verification(
        self, user_id: str, approved: bool, note: Optional[str] = None
    ) -> Notification:
        if approved:
            return await self.send_notification(
                user_id=user_id,
                notification_type=NotificationType.RIDER_VERIFICATION_APPROVED,
                title="Rider verification approved",
                body="You're verified! You can now offer rides.",
                data={"note": note} if note else None,
            )

        body = "Your rider verification was not approved."
        if note:
            body += f" Reason: {note}"
        return await self.send_notification(
            user_id=user_id,
            notification_type=NotificationType.RIDER_VERIFICATION_REJECTED,
            title="Rider verification rejected",
            body=body,
            data={"note": note} if note else None,
        )
