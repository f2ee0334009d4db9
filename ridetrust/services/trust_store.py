"""
Trust Score Store

Persists the latest trust score breakdown per user.
"""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError, NotFoundError
from ridetrust.models.common import PaginatedResult, Pagination
from ridetrust.models.trust import TrustFilters, TrustScoreBreakdown
from ridetrust.utils.timezone_utils import utc_now


logger = logging.getLogger(__name__)


class TrustScoreStore:
    """
    One document per user, replaced wholesale on every write.

    There is no merge: a recalculation overwrites the whole breakdown in a
    single replace_one, so readers never observe a partial update.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.trust_scores

    async def get(self, uid: str) -> TrustScoreBreakdown:
        try:
            doc = await self.collection.find_one({"userUid": uid})
        except PyMongoError as e:
            logger.error(f"Failed to get trust score for {uid}: {e}")
            raise InternalError(f"Failed to get trust score: {e}") from e

        if not doc:
            raise NotFoundError("Trust score")

        return TrustScoreBreakdown.model_validate(doc)

    async def put(self, uid: str, breakdown: TrustScoreBreakdown) -> None:
        document = breakdown.to_document()
        document["userUid"] = uid
        document["updatedAt"] = utc_now()

        try:
            await self.collection.replace_one({"userUid": uid}, document, upsert=True)
        except PyMongoError as e:
            logger.error(f"Failed to store trust score for {uid}: {e}")
            raise InternalError(f"Failed to store trust score: {e}") from e

    async def list_ranking(
        self, filters: TrustFilters, pagination: Pagination
    ) -> PaginatedResult[TrustScoreBreakdown]:
        """Persisted scores, highest total first, within an inclusive range."""
        query: Dict[str, Any] = {}
        score_range: Dict[str, int] = {}
        if filters.min_score is not None:
            score_range["$gte"] = filters.min_score
        if filters.max_score is not None:
            score_range["$lte"] = filters.max_score
        if score_range:
            query["total"] = score_range

        try:
            total = await self.collection.count_documents(query)
            cursor = (
                self.collection.find(query)
                .sort([("total", DESCENDING), ("userUid", 1)])
                .skip(pagination.skip)
                .limit(pagination.page_size)
            )
            docs = await cursor.to_list(length=pagination.page_size)
        except PyMongoError as e:
            logger.error(f"Failed to get trust rankings: {e}")
            raise InternalError(f"Failed to get trust rankings: {e}") from e

        return PaginatedResult.build(
            [TrustScoreBreakdown.model_validate(doc) for doc in docs], total, pagination
        )

    async def list_outliers(
        self, below: Optional[int] = None, above: Optional[int] = None
    ) -> List[TrustScoreBreakdown]:
        """
        Scores outside a band: total < below or total > above, lowest first.

        With neither bound there is no band, so nothing is an outlier.
        """
        conditions = []
        if below is not None:
            conditions.append({"total": {"$lt": below}})
        if above is not None:
            conditions.append({"total": {"$gt": above}})
        if not conditions:
            return []

        query = conditions[0] if len(conditions) == 1 else {"$or": conditions}

        try:
            cursor = self.collection.find(query).sort(
                [("total", ASCENDING), ("userUid", ASCENDING)]
            )
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to get trust outliers: {e}")
            raise InternalError(f"Failed to get trust outliers: {e}") from e

        return [TrustScoreBreakdown.model_validate(doc) for doc in docs]
