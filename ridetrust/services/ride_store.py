"""
Ride Store

Read-only access to rides owned by the ride-matching subsystem.
"""

import logging
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError
from ridetrust.models.ride import RideRecord


logger = logging.getLogger(__name__)


class RideStore:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.rides

    async def find_for_participant(self, uid: str) -> List[RideRecord]:
        """All rides where the user is the rider or the passenger."""
        try:
            cursor = self.collection.find(
                {"$or": [{"riderUid": uid}, {"passengerUid": uid}]}
            )
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to load rides for {uid}: {e}")
            raise InternalError(f"Failed to load rides: {e}") from e

        return [RideRecord.model_validate(doc) for doc in docs]
