"""
Request Dependencies

FastAPI dependencies for the admin gate and for wiring the reputation
service to the database.
"""

import hmac
from typing import Optional

from fastapi import Depends, Header
from motor.motor_asyncio import AsyncIOMotorDatabase

from ridetrust.config import settings
from ridetrust.database import get_db
from ridetrust.errors import ForbiddenError, UnauthorizedError
from ridetrust.services.audit_service import AuditService
from ridetrust.services.notification_service import NotificationService
from ridetrust.services.rating_patterns import RatingPatternAnalyzer
from ridetrust.services.rating_store import RatingStore
from ridetrust.services.reputation_service import ReputationService
from ridetrust.services.ride_store import RideStore
from ridetrust.services.statistics_reader import StatisticsReader
from ridetrust.services.trust_store import TrustScoreStore
from ridetrust.services.user_store import UserStore


async def get_admin_uid(
    x_admin_uid: Optional[str] = Header(None),
    x_admin_secret: Optional[str] = Header(None),
) -> str:
    """
    Identify the acting admin.

    SECURITY: Token verification and admin-claim checks happen upstream;
    this gate only checks the shared service secret and trusts the
    X-Admin-Uid it is given.
    """
    if not x_admin_uid:
        raise UnauthorizedError("X-Admin-Uid header required")

    if not settings.admin_api_secret or not x_admin_secret:
        raise ForbiddenError("Admin access required")

    if not hmac.compare_digest(
        x_admin_secret.encode("utf-8"), settings.admin_api_secret.encode("utf-8")
    ):
        raise ForbiddenError("Admin access required")

    return x_admin_uid


def build_reputation_service(db: AsyncIOMotorDatabase) -> ReputationService:
    users = UserStore(db)
    ratings = RatingStore(db)

    return ReputationService(
        statistics=StatisticsReader(users, RideStore(db), ratings),
        trust_store=TrustScoreStore(db),
        audit=AuditService(db),
        ratings=ratings,
        users=users,
        patterns=RatingPatternAnalyzer(ratings),
        notifications=NotificationService(db),
    )


def get_database() -> AsyncIOMotorDatabase:
    return get_db()


def get_reputation_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> ReputationService:
    return build_reputation_service(db)
