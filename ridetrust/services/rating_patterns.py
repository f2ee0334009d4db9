"""
Rating Pattern Analyzer

Aggregates a rating population into a star distribution and flags
patterns worth a moderator's attention. Read-only: nothing here hides or
flags ratings.
"""

from collections import Counter
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ridetrust.config import settings
from ridetrust.models.patterns import RatingDistribution, RatingPatterns, SuspiciousPatterns
from ridetrust.models.rating import Rating
from ridetrust.services.rating_store import RatingStore
from ridetrust.services.statistics_reader import summarize_ratings
from ridetrust.utils.timezone_utils import ensure_utc, utc_now


LOW_RATING_CUTOFF = 3  # strictly below counts as low


def round_to_tenth(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def analyze_ratings(
    ratings: Iterable[Rating],
    now: Optional[datetime] = None,
    recent_days: int = 30,
    hidden_rate_threshold: float = 0.20,
    include_hidden_in_average: bool = False,
) -> RatingPatterns:
    """Pure aggregation over an already-filtered rating population."""
    ratings = list(ratings)
    now = ensure_utc(now or utc_now())
    total = len(ratings)

    stars = Counter(r.rating for r in ratings)
    distribution = RatingDistribution(
        one_star=stars[1],
        two_star=stars[2],
        three_star=stars[3],
        four_star=stars[4],
        five_star=stars[5],
    )

    hidden_count = sum(1 for r in ratings if not r.is_visible)

    recent_since = now - timedelta(days=recent_days)
    recent_low = sum(
        1
        for r in ratings
        if r.rating < LOW_RATING_CUTOFF and ensure_utc(r.created_at) >= recent_since
    )

    one_star_raters = Counter(r.rater_uid for r in ratings if r.rating == 1)
    repeated_one_star = any(count > 1 for count in one_star_raters.values())

    high_hidden_rate = total > 0 and hidden_count / total > hidden_rate_threshold

    summary = summarize_ratings(ratings, include_hidden_in_average)

    return RatingPatterns(
        total_ratings=total,
        average_rating=round_to_tenth(summary["average_rating"]),
        distribution=distribution,
        hidden_count=hidden_count,
        recent_low_ratings=recent_low,
        suspicious_patterns=SuspiciousPatterns(
            has_multiple_one_star_from_same_user=repeated_one_star,
            has_unusually_high_hidden_rate=high_hidden_rate,
        ),
    )


class RatingPatternAnalyzer:
    def __init__(
        self,
        ratings: RatingStore,
        recent_days: Optional[int] = None,
        hidden_rate_threshold: Optional[float] = None,
        include_hidden_in_average: Optional[bool] = None,
    ):
        self.ratings = ratings
        self.recent_days = (
            settings.recent_low_rating_days if recent_days is None else recent_days
        )
        self.hidden_rate_threshold = (
            settings.hidden_rate_threshold
            if hidden_rate_threshold is None
            else hidden_rate_threshold
        )
        self.include_hidden_in_average = (
            settings.include_hidden_ratings_in_average
            if include_hidden_in_average is None
            else include_hidden_in_average
        )

    async def get_patterns(
        self,
        user_uid: Optional[str] = None,
        ride_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RatingPatterns:
        """
        Patterns for ratings received by a user and/or left on a ride.

        Defaults to the full rating population when neither filter is given.
        An empty population yields zeroed patterns, not an error.
        """
        population = await self.ratings.find(rated_uid=user_uid, ride_id=ride_id)
        return analyze_ratings(
            population,
            now=now,
            recent_days=self.recent_days,
            hidden_rate_threshold=self.hidden_rate_threshold,
            include_hidden_in_average=self.include_hidden_in_average,
        )
