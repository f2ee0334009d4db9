"""
Rating Store

Ratings collection access: lookups by composite key, moderation writes,
and population queries for statistics and pattern analysis.
"""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError
from ridetrust.models.common import PaginatedResult, Pagination
from ridetrust.models.rating import Rating, RatingFilters
from ridetrust.utils.timezone_utils import utc_now


logger = logging.getLogger(__name__)


class RatingStore:
    """
    Ratings keyed by (ride_id, rater_uid).

    Moderation is limited to hiding (is_visible -> False) and permanent
    deletion. Nothing here ever sets is_visible back to True.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.ratings

    @staticmethod
    def _key(ride_id: str, rater_uid: str) -> dict:
        return {"rideId": ride_id, "raterUid": rater_uid}

    async def get(self, ride_id: str, rater_uid: str) -> Optional[Rating]:
        try:
            doc = await self.collection.find_one(self._key(ride_id, rater_uid))
        except PyMongoError as e:
            logger.error(f"Failed to get rating {ride_id}:{rater_uid}: {e}")
            raise InternalError(f"Failed to get rating: {e}") from e

        return Rating.model_validate(doc) if doc else None

    async def hide(self, ride_id: str, rater_uid: str) -> Optional[Rating]:
        """Set is_visible to False; returns the updated rating or None."""
        try:
            doc = await self.collection.find_one_and_update(
                self._key(ride_id, rater_uid),
                {"$set": {"isVisible": False, "updatedAt": utc_now()}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Failed to hide rating {ride_id}:{rater_uid}: {e}")
            raise InternalError(f"Failed to hide rating: {e}") from e

        return Rating.model_validate(doc) if doc else None

    async def delete(self, ride_id: str, rater_uid: str) -> bool:
        try:
            result = await self.collection.delete_one(self._key(ride_id, rater_uid))
        except PyMongoError as e:
            logger.error(f"Failed to delete rating {ride_id}:{rater_uid}: {e}")
            raise InternalError(f"Failed to delete rating: {e}") from e

        return result.deleted_count > 0

    async def find(
        self, rated_uid: Optional[str] = None, ride_id: Optional[str] = None
    ) -> List[Rating]:
        """
        Load a rating population.

        rated_uid restricts to ratings received by that user; with no
        filters the whole collection is returned.
        """
        query: Dict[str, Any] = {}
        if rated_uid:
            query["ratedUid"] = rated_uid
        if ride_id:
            query["rideId"] = ride_id

        try:
            docs = await self.collection.find(query).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to load ratings: {e}")
            raise InternalError(f"Failed to load ratings: {e}") from e

        return [Rating.model_validate(doc) for doc in docs]

    async def list_ratings(
        self, filters: RatingFilters, pagination: Pagination
    ) -> PaginatedResult[Rating]:
        """Paginated listing, newest first; user filter matches rater or rated."""
        query: Dict[str, Any] = {}
        if filters.ride_id:
            query["rideId"] = filters.ride_id
        if filters.user_uid:
            query["$or"] = [
                {"raterUid": filters.user_uid},
                {"ratedUid": filters.user_uid},
            ]

        try:
            total = await self.collection.count_documents(query)
            cursor = (
                self.collection.find(query)
                .sort("createdAt", DESCENDING)
                .skip(pagination.skip)
                .limit(pagination.page_size)
            )
            docs = await cursor.to_list(length=pagination.page_size)
        except PyMongoError as e:
            logger.error(f"Failed to list ratings: {e}")
            raise InternalError(f"Failed to list ratings: {e}") from e

        return PaginatedResult.build(
            [Rating.model_validate(doc) for doc in docs], total, pagination
        )
