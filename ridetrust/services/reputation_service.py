"""
Reputation Service

Orchestrates trust score recalculation, rating moderation and rider
verification. Every mutation is followed by an audit write.

Audit and notification writes are best effort: once the primary mutation
has succeeded, a failure in either is logged and reported in the returned
MutationResult, never raised. The audit trail is therefore not a strict
ledger of every mutation.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ridetrust.errors import NotFoundError, ValidationError
from ridetrust.models.audit_log import AuditFilters, AuditLogEntry, Snapshot
from ridetrust.models.common import PaginatedResult, Pagination
from ridetrust.models.patterns import RatingPatterns
from ridetrust.models.rating import ModerationAction, Rating, RatingFilters, format_rating_id
from ridetrust.models.trust import TrustFilters, TrustScoreBreakdown
from ridetrust.models.user import User
from ridetrust.services.audit_service import AuditService
from ridetrust.services.notification_service import NotificationService
from ridetrust.services.rating_patterns import RatingPatternAnalyzer
from ridetrust.services.rating_store import RatingStore
from ridetrust.services.statistics_reader import StatisticsReader
from ridetrust.services.trust_calculator import calculate_breakdown
from ridetrust.services.trust_store import TrustScoreStore
from ridetrust.services.user_store import UserStore


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SideEffectOutcome:
    """Result of a best-effort write that followed a successful mutation."""
    name: str
    ok: bool
    error: Optional[str] = None


@dataclass
class MutationResult(Generic[T]):
    """Primary mutation outcome kept apart from its side-effect outcomes."""
    value: T
    side_effects: List[SideEffectOutcome] = field(default_factory=list)

    @property
    def side_effects_ok(self) -> bool:
        return all(outcome.ok for outcome in self.side_effects)

    @property
    def failed_side_effects(self) -> List[SideEffectOutcome]:
        return [outcome for outcome in self.side_effects if not outcome.ok]


SideEffectHook = Callable[[SideEffectOutcome], None]

EXPORT_PAGE_SIZE = 100


def build_pagination(page: int = 1, page_size: int = 50) -> Pagination:
    try:
        return Pagination(page=page, page_size=page_size)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


class ReputationService:
    """Entry point for every reputation read and admin mutation."""

    def __init__(
        self,
        statistics: StatisticsReader,
        trust_store: TrustScoreStore,
        audit: AuditService,
        ratings: RatingStore,
        users: UserStore,
        patterns: RatingPatternAnalyzer,
        notifications: Optional[NotificationService] = None,
        on_side_effect_failure: Optional[SideEffectHook] = None,
    ):
        self.statistics = statistics
        self.trust_store = trust_store
        self.audit = audit
        self.ratings = ratings
        self.users = users
        self.patterns = patterns
        self.notifications = notifications
        self.on_side_effect_failure = on_side_effect_failure

    # =========================================================================
    # Side effects
    # =========================================================================

    async def _best_effort(
        self, name: str, action: Callable[[], Awaitable[object]]
    ) -> SideEffectOutcome:
        try:
            await action()
        except Exception as e:
            logger.warning(f"Side effect {name} failed after a successful mutation: {e}")
            outcome = SideEffectOutcome(name=name, ok=False, error=str(e))
            if self.on_side_effect_failure:
                self.on_side_effect_failure(outcome)
            return outcome
        return SideEffectOutcome(name=name, ok=True)

    async def _audit(
        self,
        admin_uid: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str],
        before: Optional[Snapshot],
        after: Optional[Snapshot],
    ) -> SideEffectOutcome:
        return await self._best_effort(
            "audit",
            lambda: self.audit.log_admin_action(
                admin_uid=admin_uid,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                before=before,
                after=after,
            ),
        )

    # =========================================================================
    # Trust Scores
    # =========================================================================

    async def recalculate_trust_score(
        self, uid: str, admin_uid: str
    ) -> MutationResult[TrustScoreBreakdown]:
        """
        Recompute and persist a user's trust score.

        A user with no history gets a valid, mostly zero breakdown. Only an
        unknown user raises NotFoundError.
        """
        try:
            prior = await self.trust_store.get(uid)
        except NotFoundError:
            prior = None

        stats = await self.statistics.read(uid)
        breakdown = calculate_breakdown(uid, stats)
        await self.trust_store.put(uid, breakdown)

        logger.info(
            f"Trust score for {uid} recalculated by {admin_uid}: "
            f"{prior.total if prior else None} -> {breakdown.total}"
        )

        outcome = await self._audit(
            admin_uid=admin_uid,
            action="recalculate_trust_score",
            entity_type="user",
            entity_id=uid,
            before=prior.summary() if prior else None,
            after=breakdown.summary(),
        )
        return MutationResult(value=breakdown, side_effects=[outcome])

    async def get_breakdown(self, uid: str) -> TrustScoreBreakdown:
        return await self.trust_store.get(uid)

    async def get_trust_ranking(
        self,
        min_score: Optional[int] = None,
        max_score: Optional[int] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedResult[TrustScoreBreakdown]:
        try:
            filters = TrustFilters(min_score=min_score, max_score=max_score)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e
        if (
            min_score is not None
            and max_score is not None
            and min_score > max_score
        ):
            raise ValidationError(
                "minScore must not exceed maxScore",
                details=[{"field": "minScore", "message": "must not exceed maxScore"}],
            )
        return await self.trust_store.list_ranking(filters, build_pagination(page, page_size))

    # =========================================================================
    # Ratings
    # =========================================================================

    async def moderate_rating(
        self, ride_id: str, rater_uid: str, action: str, admin_uid: str
    ) -> MutationResult[Rating]:
        """
        Hide or permanently delete a rating.

        Visibility only moves visible -> hidden; either state may be
        deleted. Returns the hidden rating, or the removed one on delete.
        """
        try:
            moderation = ModerationAction(action)
        except ValueError as e:
            raise ValidationError(
                f"Unsupported moderation action: {action}",
                details=[{"field": "action", "message": "must be one of: hide, delete"}],
            ) from e

        current = await self.ratings.get(ride_id, rater_uid)
        if current is None:
            raise NotFoundError("Rating")

        before = current.key_snapshot()

        if moderation == ModerationAction.HIDE:
            updated = await self.ratings.hide(ride_id, rater_uid)
            if updated is None:
                raise NotFoundError("Rating")
            result, after = updated, {"isVisible": False}
        else:
            if not await self.ratings.delete(ride_id, rater_uid):
                raise NotFoundError("Rating")
            result, after = current, None

        logger.info(f"Rating {ride_id}:{rater_uid} {moderation.value} by {admin_uid}")

        outcome = await self._audit(
            admin_uid=admin_uid,
            action=f"{moderation.value}_rating",
            entity_type="rating",
            entity_id=format_rating_id(ride_id, rater_uid),
            before=before,
            after=after,
        )
        return MutationResult(value=result, side_effects=[outcome])

    async def list_ratings(
        self,
        ride_id: Optional[str] = None,
        user_uid: Optional[str] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedResult[Rating]:
        filters = RatingFilters(ride_id=ride_id, user_uid=user_uid)
        return await self.ratings.list_ratings(filters, build_pagination(page, page_size))

    async def get_patterns(
        self, user_uid: Optional[str] = None, ride_id: Optional[str] = None
    ) -> RatingPatterns:
        return await self.patterns.get_patterns(user_uid=user_uid, ride_id=ride_id)

    # =========================================================================
    # Rider Verification
    # =========================================================================

    async def verify_rider(
        self, uid: str, approved: bool, note: Optional[str], admin_uid: str
    ) -> MutationResult[User]:
        """Record a verification decision and tell the user about it."""
        current = await self.users.get_user(uid)
        if current is None:
            raise NotFoundError("User")

        updated = await self.users.set_rider_verification(uid, approved, note)
        if updated is None:
            raise NotFoundError("User")

        after = updated.verification_snapshot()
        after["note"] = note

        side_effects = [
            await self._audit(
                admin_uid=admin_uid,
                action="verify_rider_approved" if approved else "verify_rider_rejected",
                entity_type="user",
                entity_id=uid,
                before=current.verification_snapshot(),
                after=after,
            )
        ]

        if self.notifications is not None:
            side_effects.append(
                await self._best_effort(
                    "notification",
                    lambda: self.notifications.notify_rider_verification(uid, approved, note),
                )
            )

        return MutationResult(value=updated, side_effects=side_effects)

    # =========================================================================
    # Audit Log
    # =========================================================================

    async def list_audit_log(
        self, filters: AuditFilters, page: int = 1, page_size: int = 50
    ) -> PaginatedResult[AuditLogEntry]:
        """Audit storage faults propagate here: listing is the primary operation."""
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationError(
                "startDate must not be after endDate",
                details=[{"field": "startDate", "message": "must not be after endDate"}],
            )
        return await self.audit.list_entries(filters, build_pagination(page, page_size))

    async def get_audit_entry(self, entry_id: str) -> AuditLogEntry:
        return await self.audit.get(entry_id)

    async def get_entity_history(
        self, entity_type: str, entity_id: str, limit: int = 50
    ) -> List[AuditLogEntry]:
        if not 1 <= limit <= 100:
            raise ValidationError(
                "limit must be between 1 and 100",
                details=[{"field": "limit", "message": "must be between 1 and 100"}],
            )
        return await self.audit.get_entity_history(entity_type, entity_id, limit=limit)

    # =========================================================================
    # Outliers and exports
    # =========================================================================

    async def get_trust_outliers(
        self, below: Optional[int] = None, above: Optional[int] = None
    ) -> List[TrustScoreBreakdown]:
        """Users scoring under `below` or over `above`, lowest first."""
        for name, value in (("below", below), ("above", above)):
            if value is not None and not 0 <= value <= 100:
                raise ValidationError(
                    f"{name} must be between 0 and 100",
                    details=[{"field": name, "message": "must be between 0 and 100"}],
                )
        return await self.trust_store.list_outliers(below=below, above=above)

    async def export_ratings(self) -> List[Rating]:
        """Every rating, newest first, read one full page at a time."""
        ratings: List[Rating] = []
        page = 1
        while True:
            result = await self.ratings.list_ratings(
                RatingFilters(), build_pagination(page, EXPORT_PAGE_SIZE)
            )
            ratings.extend(result.data)
            if page >= result.total_pages:
                return ratings
            page += 1

    async def export_audit_log(self, filters: Optional[AuditFilters] = None) -> List[AuditLogEntry]:
        entries: List[AuditLogEntry] = []
        page = 1
        while True:
            result = await self.list_audit_log(
                filters or AuditFilters(), page=page, page_size=EXPORT_PAGE_SIZE
            )
            entries.extend(result.data)
            if page >= result.total_pages:
                return entries
            page += 1
