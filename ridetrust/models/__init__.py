"""RideTrust Models Package"""

from ridetrust.models.common import CamelModel, Pagination, PaginatedResult
from ridetrust.models.ride import RideRecord, RideStatus, ParticipantRole, Cancellation, CancellationCategory
from ridetrust.models.rating import Rating, RatingFilters, ModerationAction
from ridetrust.models.trust import (
    TrustScoreBreakdown, TrustComponents, TrustCalculations, TrustCategory, TrustFilters, UserStatistics,
)
from ridetrust.models.audit_log import AuditLogEntry, AuditLogCreate, AuditDiff, AuditFilters, Snapshot
from ridetrust.models.patterns import RatingPatterns, RatingDistribution, SuspiciousPatterns
from ridetrust.models.user import User, RiderVerificationStatus, VerifyRiderRequest
from ridetrust.models.notification import Notification, NotificationType

__all__ = [
    "CamelModel", "Pagination", "PaginatedResult",
    "RideRecord", "RideStatus", "ParticipantRole", "Cancellation", "CancellationCategory",
    "Rating", "RatingFilters", "ModerationAction",
    "TrustScoreBreakdown", "TrustComponents", "TrustCalculations", "TrustCategory", "TrustFilters",
    "UserStatistics",
    "AuditLogEntry", "AuditLogCreate", "AuditDiff", "AuditFilters", "Snapshot",
    "RatingPatterns", "RatingDistribution", "SuspiciousPatterns",
    "User", "RiderVerificationStatus", "VerifyRiderRequest",
    "Notification", "NotificationType",
]
