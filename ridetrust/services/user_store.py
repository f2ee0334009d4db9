"""
User Store

Identity lookups and rider verification writes against the users collection.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError
from ridetrust.models.user import RiderVerificationStatus, User
from ridetrust.utils.timezone_utils import utc_now


logger = logging.getLogger(__name__)


class UserStore:
    """Thin wrapper over the users collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.users

    async def get_user(self, uid: str) -> Optional[User]:
        try:
            doc = await self.collection.find_one({"uid": uid})
        except PyMongoError as e:
            logger.error(f"Failed to get user {uid}: {e}")
            raise InternalError(f"Failed to get user: {e}") from e

        return User.model_validate(doc) if doc else None

    async def exists(self, uid: str) -> bool:
        try:
            count = await self.collection.count_documents({"uid": uid}, limit=1)
        except PyMongoError as e:
            logger.error(f"Failed to look up user {uid}: {e}")
            raise InternalError(f"Failed to look up user: {e}") from e

        return count > 0

    async def set_rider_verification(
        self, uid: str, approved: bool, note: Optional[str] = None
    ) -> Optional[User]:
        """Record a verification decision; returns the updated user or None."""
        update = {
            "riderVerificationStatus": (
                RiderVerificationStatus.APPROVED.value
                if approved
                else RiderVerificationStatus.REJECTED.value
            ),
            "isRiderVerified": approved,
            "updatedAt": utc_now(),
        }
        if note:
            update["verificationNote"] = note

        try:
            doc = await self.collection.find_one_and_update(
                {"uid": uid},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to update verification for {uid}: {e}")
            raise InternalError(f"Failed to update rider verification: {e}") from e

        return User.model_validate(doc) if doc else None
