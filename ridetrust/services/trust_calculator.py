"""
Trust Score Calculator

Pure, deterministic conversion of user statistics into a bounded 0-100
trust score with an auditable breakdown. No I/O.

Components:
- Rating (0-30): average rating x 6, zero ratings score 0
- Completion (0-25): completed / total rides x 25
- Reliability (0-25): 25 minus cancellation, late cancellation and no-show penalties
- Experience (0-20): tiered by total rides
"""

from decimal import ROUND_HALF_UP, Decimal

from ridetrust.models.trust import (
    CompletionCalculation,
    ExperienceCalculation,
    RatingCalculation,
    ReliabilityCalculation,
    TrustCalculations,
    TrustCategory,
    TrustComponents,
    TrustScoreBreakdown,
    UserStatistics,
)


RATING_MAX = 30
COMPLETION_MAX = 25
RELIABILITY_MAX = 25
EXPERIENCE_MAX = 20

RATING_MULTIPLIER = 6  # 5 stars -> 30 points

CANCELLATION_PENALTY = 2
LATE_CANCELLATION_PENALTY = 5
NO_SHOW_PENALTY = 10

# (minimum total rides, points), highest tier first
EXPERIENCE_TIERS = (
    (31, 20),
    (16, 15),
    (6, 10),
    (1, 5),
)

CATEGORY_THRESHOLDS = (
    (80, TrustCategory.EXCELLENT),
    (60, TrustCategory.GOOD),
    (40, TrustCategory.FAIR),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_rating_score(average_rating: float, rating_count: int) -> int:
    # Absence of data is never rewarded
    if rating_count <= 0:
        return 0
    points = round_half_up(average_rating * RATING_MULTIPLIER)
    return max(0, min(points, RATING_MAX))


def calculate_completion_rate(completed_rides: int, total_rides: int) -> float:
    if total_rides <= 0:
        return 0.0
    return completed_rides / total_rides


def calculate_completion_score(completed_rides: int, total_rides: int) -> int:
    rate = calculate_completion_rate(completed_rides, total_rides)
    return max(0, min(round_half_up(rate * COMPLETION_MAX), COMPLETION_MAX))


def calculate_reliability_deductions(
    cancellations: int, late_cancellations: int, no_shows: int
) -> int:
    return (
        cancellations * CANCELLATION_PENALTY
        + late_cancellations * LATE_CANCELLATION_PENALTY
        + no_shows * NO_SHOW_PENALTY
    )


def calculate_reliability_score(
    cancellations: int, late_cancellations: int, no_shows: int
) -> int:
    deductions = calculate_reliability_deductions(cancellations, late_cancellations, no_shows)
    return max(0, RELIABILITY_MAX - deductions)


def calculate_experience_score(total_rides: int) -> int:
    """Milestone tiers: 0 -> 0, 1-5 -> 5, 6-15 -> 10, 16-30 -> 15, 31+ -> 20."""
    for minimum, points in EXPERIENCE_TIERS:
        if total_rides >= minimum:
            return points
    return 0


def get_trust_category(total: int) -> TrustCategory:
    for threshold, category in CATEGORY_THRESHOLDS:
        if total >= threshold:
            return category
    return TrustCategory.POOR


def calculate_breakdown(user_uid: str, stats: UserStatistics) -> TrustScoreBreakdown:
    """Compute every component, the total and the category for one user."""
    # average_rating is already 0.0 when no rating is eligible for the average
    rating_points = calculate_rating_score(stats.average_rating, stats.total_ratings)

    total_rides = stats.total_rides
    completed_rides = stats.completed_rides
    completion_points = calculate_completion_score(completed_rides, total_rides)

    deductions = calculate_reliability_deductions(
        stats.cancellations, stats.late_cancellations, stats.no_shows
    )
    reliability_points = calculate_reliability_score(
        stats.cancellations, stats.late_cancellations, stats.no_shows
    )

    experience_points = calculate_experience_score(total_rides)

    components = TrustComponents(
        rating=rating_points,
        completion=completion_points,
        reliability=reliability_points,
        experience=experience_points,
    )
    total = rating_points + completion_points + reliability_points + experience_points

    return TrustScoreBreakdown(
        user_uid=user_uid,
        total=total,
        category=get_trust_category(total),
        components=components,
        calculations=TrustCalculations(
            rating=RatingCalculation(
                average_rating=stats.average_rating,
                total_ratings=stats.total_ratings,
                points=rating_points,
            ),
            completion=CompletionCalculation(
                completion_rate=calculate_completion_rate(completed_rides, total_rides),
                completed_rides=completed_rides,
                total_rides=total_rides,
                points=completion_points,
            ),
            reliability=ReliabilityCalculation(
                cancellations=stats.cancellations,
                late_cancellations=stats.late_cancellations,
                no_shows=stats.no_shows,
                deductions=deductions,
                points=reliability_points,
            ),
            experience=ExperienceCalculation(
                total_rides=total_rides,
                points=experience_points,
            ),
        ),
    )
