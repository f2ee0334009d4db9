"""
Trust Router

Admin endpoints for trust score recalculation, breakdowns and rankings.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ridetrust.config import settings
from ridetrust.dependencies import get_admin_uid, get_reputation_service
from ridetrust.routers.responses import dump, ok, ok_mutation
from ridetrust.services.reputation_service import ReputationService


router = APIRouter()


@router.post("/users/{uid}/trust/recalculate")
async def recalculate_trust_score(
    uid: str,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Recalculate a user's trust score from their ride and rating history.

    SECURITY: Admin action, recorded in the audit trail.
    """
    result = await service.recalculate_trust_score(uid, admin_uid)
    return ok_mutation(result)


@router.get("/users/{uid}/trust/breakdown")
async def get_trust_breakdown(
    uid: str,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """Get the last computed trust score breakdown."""
    return ok(await service.get_breakdown(uid))


@router.get("/trust/ranking")
async def get_trust_ranking(
    min_score: Optional[int] = Query(None, alias="minScore"),
    max_score: Optional[int] = Query(None, alias="maxScore"),
    page: int = 1,
    page_size: int = Query(settings.default_page_size, alias="pageSize"),
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """Users ordered by trust score, highest first."""
    result = await service.get_trust_ranking(
        min_score=min_score, max_score=max_score, page=page, page_size=page_size
    )
    return ok(result)


@router.get("/trust/outliers")
async def get_trust_outliers(
    below: Optional[int] = None,
    above: Optional[int] = None,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Users scoring below `below` or above `above`, lowest first.

    Without either bound the list is empty.
    """
    outliers = await service.get_trust_outliers(below=below, above=above)
    return ok([dump(breakdown) for breakdown in outliers])
