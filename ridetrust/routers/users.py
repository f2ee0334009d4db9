"""
Users Router

Rider verification decisions.
"""

from fastapi import APIRouter, Depends

from ridetrust.dependencies import get_admin_uid, get_reputation_service
from ridetrust.models.user import VerifyRiderRequest
from ridetrust.routers.responses import ok_mutation
from ridetrust.services.reputation_service import ReputationService


router = APIRouter()


@router.post("/users/{uid}/verify-rider")
async def verify_rider(
    uid: str,
    request: VerifyRiderRequest,
    admin_uid: str = Depends(get_admin_uid),
    service: ReputationService = Depends(get_reputation_service),
):
    """
    Approve or reject a rider verification request.

    SECURITY: Admin action, recorded in the audit trail. The user is
    notified on a best-effort basis.
    """
    result = await service.verify_rider(uid, request.approved, request.note, admin_uid)
    return ok_mutation(result)
