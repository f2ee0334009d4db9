"""RideTrust Services Package"""

from ridetrust.services.audit_service import AuditService
from ridetrust.services.notification_service import NotificationService
from ridetrust.services.rating_patterns import RatingPatternAnalyzer
from ridetrust.services.rating_store import RatingStore
from ridetrust.services.reputation_service import MutationResult, ReputationService, SideEffectOutcome
from ridetrust.services.ride_store import RideStore
from ridetrust.services.statistics_reader import StatisticsReader
from ridetrust.services.trust_store import TrustScoreStore
from ridetrust.services.user_store import UserStore

__all__ = [
    "AuditService",
    "NotificationService",
    "RatingPatternAnalyzer",
    "RatingStore",
    "MutationResult",
    "ReputationService",
    "SideEffectOutcome",
    "RideStore",
    "StatisticsReader",
    "TrustScoreStore",
    "UserStore",
]
