"""
Tests for Mongo Stores

Query shapes and error mapping for the user, rating and trust stores.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ridetrust.errors import InternalError, NotFoundError
from ridetrust.models import Pagination, RatingFilters, TrustFilters, UserStatistics
from ridetrust.services.rating_store import RatingStore
from ridetrust.services.ride_store import RideStore
from ridetrust.services.trust_calculator import calculate_breakdown
from ridetrust.services.trust_store import TrustScoreStore
from ridetrust.services.user_store import UserStore


CREATED = datetime(2026, 5, 1, tzinfo=timezone.utc)


def rating_doc(ride_id="ride1", rater_uid="u2", is_visible=True) -> dict:
    return {
        "rideId": ride_id,
        "raterUid": rater_uid,
        "ratedUid": "u1",
        "raterRole": "passenger",
        "rating": 4,
        "isVisible": is_visible,
        "createdAt": CREATED,
        "updatedAt": CREATED,
    }


def mock_cursor(docs):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def db():
    return MagicMock()


class TestUserStore:

    @pytest.mark.asyncio
    async def test_set_rider_verification(self, db):
        db.users.find_one_and_update = AsyncMock(return_value={
            "uid": "u1",
            "riderVerificationStatus": "approved",
            "isRiderVerified": True,
            "verificationNote": "ok",
        })
        store = UserStore(db)

        user = await store.set_rider_verification("u1", True, "ok")

        call_args = db.users.find_one_and_update.call_args
        assert call_args[0][0] == {"uid": "u1"}
        update = call_args[0][1]["$set"]
        assert update["riderVerificationStatus"] == "approved"
        assert update["isRiderVerified"] is True
        assert update["verificationNote"] == "ok"
        assert user.is_rider_verified is True

    @pytest.mark.asyncio
    async def test_set_rider_verification_unknown_user(self, db):
        db.users.find_one_and_update = AsyncMock(return_value=None)

        assert await UserStore(db).set_rider_verification("ghost", False) is None

    @pytest.mark.asyncio
    async def test_exists(self, db):
        db.users.count_documents = AsyncMock(return_value=0)

        assert await UserStore(db).exists("ghost") is False
        db.users.count_documents.assert_called_once_with({"uid": "ghost"}, limit=1)

    @pytest.mark.asyncio
    async def test_storage_fault(self, db):
        db.users.find_one = AsyncMock(side_effect=PyMongoError("down"))

        with pytest.raises(InternalError):
            await UserStore(db).get_user("u1")


class TestRideStore:

    @pytest.mark.asyncio
    async def test_find_for_participant(self, db):
        cursor = mock_cursor([{
            "rideId": "ride1",
            "riderUid": "u1",
            "passengerUid": "u2",
            "status": "completed",
            "departureTime": CREATED,
        }])
        db.rides.find = MagicMock(return_value=cursor)

        rides = await RideStore(db).find_for_participant("u2")

        db.rides.find.assert_called_once_with(
            {"$or": [{"riderUid": "u2"}, {"passengerUid": "u2"}]}
        )
        assert rides[0].is_terminal


class TestRatingStore:

    @pytest.mark.asyncio
    async def test_hide_sets_visibility_false(self, db):
        db.ratings.find_one_and_update = AsyncMock(return_value=rating_doc(is_visible=False))

        rating = await RatingStore(db).hide("ride1", "u2")

        call_args = db.ratings.find_one_and_update.call_args
        assert call_args[0][0] == {"rideId": "ride1", "raterUid": "u2"}
        assert call_args[0][1]["$set"]["isVisible"] is False
        assert rating.is_visible is False

    @pytest.mark.asyncio
    async def test_delete(self, db):
        db.ratings.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

        assert await RatingStore(db).delete("ride1", "u2") is False

    @pytest.mark.asyncio
    async def test_list_ratings_user_filter(self, db):
        cursor = mock_cursor([rating_doc()])
        db.ratings.count_documents = AsyncMock(return_value=1)
        db.ratings.find = MagicMock(return_value=cursor)

        result = await RatingStore(db).list_ratings(
            RatingFilters(user_uid="u1"), Pagination(page=1, page_size=10)
        )

        db.ratings.find.assert_called_once_with(
            {"$or": [{"raterUid": "u1"}, {"ratedUid": "u1"}]}
        )
        cursor.sort.assert_called_once_with("createdAt", DESCENDING)
        assert result.data[0].rating_id == "ride1:u2"
        assert result.total_pages == 1

    @pytest.mark.asyncio
    async def test_find_storage_fault(self, db):
        cursor = mock_cursor([])
        cursor.to_list = AsyncMock(side_effect=PyMongoError("down"))
        db.ratings.find = MagicMock(return_value=cursor)

        with pytest.raises(InternalError):
            await RatingStore(db).find(rated_uid="u1")


class TestTrustScoreStore:

    @pytest.mark.asyncio
    async def test_put_replaces_whole_document(self, db):
        db.trust_scores.replace_one = AsyncMock()
        breakdown = calculate_breakdown("u1", UserStatistics())

        await TrustScoreStore(db).put("u1", breakdown)

        call_args = db.trust_scores.replace_one.call_args
        assert call_args[0][0] == {"userUid": "u1"}
        document = call_args[0][1]
        assert document["total"] == 25
        assert document["components"]["reliability"] == 25
        assert "updatedAt" in document
        assert call_args[1]["upsert"] is True

    @pytest.mark.asyncio
    async def test_get_missing(self, db):
        db.trust_scores.find_one = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await TrustScoreStore(db).get("u1")

    @pytest.mark.asyncio
    async def test_get_round_trips_stored_document(self, db):
        breakdown = calculate_breakdown("u1", UserStatistics())
        document = breakdown.to_document()
        document["_id"] = "objectid"
        document["updatedAt"] = CREATED
        db.trust_scores.find_one = AsyncMock(return_value=document)

        assert await TrustScoreStore(db).get("u1") == breakdown

    @pytest.mark.asyncio
    async def test_ranking_query(self, db):
        cursor = mock_cursor([])
        db.trust_scores.count_documents = AsyncMock(return_value=0)
        db.trust_scores.find = MagicMock(return_value=cursor)

        await TrustScoreStore(db).list_ranking(
            TrustFilters(min_score=40, max_score=80), Pagination()
        )

        db.trust_scores.find.assert_called_once_with({"total": {"$gte": 40, "$lte": 80}})
        cursor.sort.assert_called_once_with([("total", DESCENDING), ("userUid", 1)])

    @pytest.mark.asyncio
    async def test_outliers_query(self, db):
        cursor = mock_cursor([])
        db.trust_scores.find = MagicMock(return_value=cursor)

        await TrustScoreStore(db).list_outliers(below=40, above=80)

        db.trust_scores.find.assert_called_once_with(
            {"$or": [{"total": {"$lt": 40}}, {"total": {"$gt": 80}}]}
        )
        cursor.sort.assert_called_once_with([("total", ASCENDING), ("userUid", ASCENDING)])

    @pytest.mark.asyncio
    async def test_outliers_single_bound(self, db):
        db.trust_scores.find = MagicMock(return_value=mock_cursor([]))

        await TrustScoreStore(db).list_outliers(below=40)

        db.trust_scores.find.assert_called_once_with({"total": {"$lt": 40}})

    @pytest.mark.asyncio
    async def test_outliers_without_bounds(self, db):
        db.trust_scores.find = MagicMock()

        assert await TrustScoreStore(db).list_outliers() == []
        db.trust_scores.find.assert_not_called()
