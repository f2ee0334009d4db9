"""
Ratings Router

Admin endpoints for rating moderation and pattern analysis.
Ratings are addressed as "{rideId}:{raterUid}".
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ridetrust.config import settings
from ridetrust.dependencies import get_admin_uid, get_reputation_service
from ridetrust.errors import ValidationError
from ridetrust.models.rating import ModerationAction, parse_rating_id
from ridetrust.routers.responses import ok, ok_mutation
from ridetrust.services.reputation_service import ReputationService
from ridetrust.utils.csv_export import csv_response, render_csv


router = APIRouter()


def _split_rating_id(rating_id: str) -> tuple:
    key = parse_rating_id(rating_id)
    if key is None:
        raise ValidationError(
            "Invalid rating ID format. Expected format: rideId:raterUid",
            details=[{"field": "ratingId", "message": "expected rideId:raterUid"}],
        )
    return key


@router.get("/ratings")
async def list_ratings(
    ride_id: Optional[str] = Query(None, alias="rideId"),
    user_uid: Optional[str] = Query(None, alias="userUid"),
    page: int = 1,
    page_size: int = Query(settings.default_page_size, alias="pageSize"),
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """List ratings, newest first, optionally for one ride or user."""
    result = await service.list_ratings(
        ride_id=ride_id, user_uid=user_uid, page=page, page_size=page_size
    )
    return ok(result)


RATINGS_CSV_HEADERS = [
    "ID",
    "Ride ID",
    "Rater UID",
    "Rated UID",
    "Rater Role",
    "Rating",
    "Review",
    "Tags",
    "Visible",
    "Created At",
    "Updated At",
]


@router.get("/ratings/export.csv")
async def export_ratings(
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """Export every rating, hidden ones included, as CSV."""
    ratings = await service.export_ratings()
    rows = (
        [
            rating.rating_id,
            rating.ride_id,
            rating.rater_uid,
            rating.rated_uid,
            rating.rater_role,
            rating.rating,
            rating.review,
            ";".join(rating.tags) if rating.tags else None,
            rating.is_visible,
            rating.created_at,
            rating.updated_at,
        ]
        for rating in ratings
    )
    return csv_response(render_csv(RATINGS_CSV_HEADERS, rows), "ratings-export")


@router.get("/ratings/patterns")
async def get_rating_patterns(
    user_uid: Optional[str] = Query(None, alias="userUid"),
    ride_id: Optional[str] = Query(None, alias="rideId"),
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Rating distribution and abuse indicators.

    Diagnostic only: nothing is hidden or flagged automatically.
    """
    return ok(await service.get_patterns(user_uid=user_uid, ride_id=ride_id))


@router.post("/ratings/{rating_id}/hide")
async def hide_rating(
    rating_id: str,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Hide a rating from public display.

    SECURITY: Admin action, recorded in the audit trail. There is no unhide.
    """
    ride_id, rater_uid = _split_rating_id(rating_id)
    result = await service.moderate_rating(
        ride_id, rater_uid, ModerationAction.HIDE.value, admin_uid
    )
    return ok_mutation(result)


@router.delete("/ratings/{rating_id}")
async def delete_rating(
    rating_id: str,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Permanently delete a rating.

    SECURITY: Admin action, recorded in the audit trail. Irreversible.
    """
    ride_id, rater_uid = _split_rating_id(rating_id)
    result = await service.moderate_rating(
        ride_id, rater_uid, ModerationAction.DELETE.value, admin_uid
    )
    return ok_mutation(result)
