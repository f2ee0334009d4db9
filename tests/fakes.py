"""
In-memory collaborators for service and router tests.

Each fake mirrors the public methods of the Mongo-backed class it replaces.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from ridetrust.errors import InternalError, NotFoundError
from ridetrust.models import (
    AuditDiff,
    AuditFilters,
    AuditLogEntry,
    Cancellation,
    PaginatedResult,
    Pagination,
    Rating,
    RatingFilters,
    RideRecord,
    TrustFilters,
    TrustScoreBreakdown,
    User,
)
from ridetrust.services.rating_patterns import RatingPatternAnalyzer
from ridetrust.services.reputation_service import ReputationService
from ridetrust.services.statistics_reader import StatisticsReader


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_rating(
    ride_id: str,
    rater_uid: str,
    rated_uid: str,
    rating: int,
    is_visible: bool = True,
    created_at: Optional[datetime] = None,
) -> Rating:
    return Rating(
        ride_id=ride_id,
        rater_uid=rater_uid,
        rated_uid=rated_uid,
        rater_role="passenger",
        rating=rating,
        is_visible=is_visible,
        created_at=created_at or NOW - timedelta(days=1),
    )


def make_ride(
    ride_id: str,
    rider_uid: str,
    passenger_uid: Optional[str],
    status: str = "completed",
    departure_time: Optional[datetime] = None,
    cancelled_by: Optional[str] = None,
    cancelled_at: Optional[datetime] = None,
    category: str = "after_match",
) -> RideRecord:
    departure_time = departure_time or NOW
    cancellation = None
    if cancelled_by:
        cancellation = Cancellation(
            cancelled_by_uid=cancelled_by,
            cancelled_at=cancelled_at or departure_time - timedelta(days=2),
            category=category,
        )
    return RideRecord(
        ride_id=ride_id,
        rider_uid=rider_uid,
        passenger_uid=passenger_uid,
        status=status,
        departure_time=departure_time,
        cancellation=cancellation,
    )


def _page(items: list, pagination: Pagination) -> PaginatedResult:
    start = pagination.skip
    return PaginatedResult.build(
        items[start:start + pagination.page_size], len(items), pagination
    )


class FakeUserStore:
    def __init__(self, users: Optional[List[User]] = None):
        self.users: Dict[str, User] = {u.uid: u for u in users or []}

    async def get_user(self, uid: str) -> Optional[User]:
        return self.users.get(uid)

    async def exists(self, uid: str) -> bool:
        return uid in self.users

    async def set_rider_verification(
        self, uid: str, approved: bool, note: Optional[str] = None
    ) -> Optional[User]:
        user = self.users.get(uid)
        if user is None:
            return None
        update = {
            "rider_verification_status": "approved" if approved else "rejected",
            "is_rider_verified": approved,
        }
        if note:
            update["verification_note"] = note
        self.users[uid] = user.model_copy(update=update)
        return self.users[uid]


class FakeRideStore:
    def __init__(self, rides: Optional[List[RideRecord]] = None):
        self.rides = list(rides or [])

    async def find_for_participant(self, uid: str) -> List[RideRecord]:
        return [r for r in self.rides if uid in (r.rider_uid, r.passenger_uid)]


class FakeRatingStore:
    def __init__(self, ratings: Optional[List[Rating]] = None):
        self.ratings: Dict[Tuple[str, str], Rating] = {
            (r.ride_id, r.rater_uid): r for r in ratings or []
        }

    async def get(self, ride_id: str, rater_uid: str) -> Optional[Rating]:
        return self.ratings.get((ride_id, rater_uid))

    async def hide(self, ride_id: str, rater_uid: str) -> Optional[Rating]:
        current = self.ratings.get((ride_id, rater_uid))
        if current is None:
            return None
        self.ratings[(ride_id, rater_uid)] = current.model_copy(update={"is_visible": False})
        return self.ratings[(ride_id, rater_uid)]

    async def delete(self, ride_id: str, rater_uid: str) -> bool:
        return self.ratings.pop((ride_id, rater_uid), None) is not None

    async def find(
        self, rated_uid: Optional[str] = None, ride_id: Optional[str] = None
    ) -> List[Rating]:
        return [
            r
            for r in self.ratings.values()
            if (rated_uid is None or r.rated_uid == rated_uid)
            and (ride_id is None or r.ride_id == ride_id)
        ]

    async def list_ratings(
        self, filters: RatingFilters, pagination: Pagination
    ) -> PaginatedResult[Rating]:
        items = [
            r
            for r in self.ratings.values()
            if (filters.ride_id is None or r.ride_id == filters.ride_id)
            and (filters.user_uid is None or filters.user_uid in (r.rater_uid, r.rated_uid))
        ]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return _page(items, pagination)


class FakeTrustStore:
    def __init__(self):
        self.scores: Dict[str, TrustScoreBreakdown] = {}
        self.put_calls = 0

    async def get(self, uid: str) -> TrustScoreBreakdown:
        if uid not in self.scores:
            raise NotFoundError("Trust score")
        return self.scores[uid]

    async def put(self, uid: str, breakdown: TrustScoreBreakdown) -> None:
        self.put_calls += 1
        self.scores[uid] = breakdown.model_copy(deep=True)

    async def list_ranking(
        self, filters: TrustFilters, pagination: Pagination
    ) -> PaginatedResult[TrustScoreBreakdown]:
        items = [
            s
            for s in self.scores.values()
            if (filters.min_score is None or s.total >= filters.min_score)
            and (filters.max_score is None or s.total <= filters.max_score)
        ]
        items.sort(key=lambda s: (-s.total, s.user_uid))
        return _page(items, pagination)

    async def list_outliers(
        self, below: Optional[int] = None, above: Optional[int] = None
    ) -> List[TrustScoreBreakdown]:
        if below is None and above is None:
            return []
        items = [
            s
            for s in self.scores.values()
            if (below is not None and s.total < below)
            or (above is not None and s.total > above)
        ]
        return sorted(items, key=lambda s: (s.total, s.user_uid))


class FakeAuditService:
    def __init__(self):
        self.entries: List[AuditLogEntry] = []

    async def log_admin_action(
        self, admin_uid, action, entity_type, entity_id=None, before=None, after=None
    ) -> AuditLogEntry:
        diff = None
        if before is not None or after is not None:
            diff = AuditDiff(before=before, after=after)
        entry = AuditLogEntry(
            id=f"audit-{len(self.entries) + 1}",
            admin_uid=admin_uid,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            diff=diff,
            created_at=NOW + timedelta(seconds=len(self.entries)),
        )
        self.entries.append(entry)
        return entry

    async def list_entries(
        self, filters: AuditFilters, pagination: Pagination
    ) -> PaginatedResult[AuditLogEntry]:
        items = [
            e
            for e in reversed(self.entries)
            if (filters.admin_uid is None or e.admin_uid == filters.admin_uid)
            and (filters.entity_type is None or e.entity_type == filters.entity_type)
            and (filters.entity_id is None or e.entity_id == filters.entity_id)
            and (filters.date_from is None or e.created_at >= filters.date_from)
            and (filters.date_to is None or e.created_at <= filters.date_to)
        ]
        return _page(items, pagination)

    async def get(self, entry_id: str) -> AuditLogEntry:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError("Audit log entry")

    async def get_entity_history(
        self, entity_type: str, entity_id: str, limit: int = 50
    ) -> List[AuditLogEntry]:
        matching = [
            e
            for e in reversed(self.entries)
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return matching[:limit]


class FailingAuditService(FakeAuditService):
    """Audit trail whose writes always fail."""

    async def log_admin_action(self, *args, **kwargs) -> AuditLogEntry:
        raise InternalError("Failed to log audit action: connection refused")


class FakeNotificationService:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[str, bool, Optional[str]]] = []

    async def notify_rider_verification(
        self, user_id: str, approved: bool, note: Optional[str] = None
    ):
        if self.fail:
            raise InternalError("Failed to send notification: timeout")
        self.sent.append((user_id, approved, note))


def build_service(
    users: Optional[List[User]] = None,
    rides: Optional[List[RideRecord]] = None,
    ratings: Optional[List[Rating]] = None,
    audit: Optional[FakeAuditService] = None,
    notifications: Optional[FakeNotificationService] = None,
    on_side_effect_failure=None,
    include_hidden_in_average: bool = False,
) -> ReputationService:
    user_store = FakeUserStore(users)
    rating_store = FakeRatingStore(ratings)

    return ReputationService(
        statistics=StatisticsReader(
            user_store,
            FakeRideStore(rides),
            rating_store,
            late_cancellation_window_hours=24,
            include_hidden_in_average=include_hidden_in_average,
        ),
        trust_store=FakeTrustStore(),
        audit=audit if audit is not None else FakeAuditService(),
        ratings=rating_store,
        users=user_store,
        patterns=RatingPatternAnalyzer(
            rating_store,
            recent_days=30,
            hidden_rate_threshold=0.20,
            include_hidden_in_average=include_hidden_in_average,
        ),
        notifications=notifications if notifications is not None else FakeNotificationService(),
        on_side_effect_failure=on_side_effect_failure,
    )
