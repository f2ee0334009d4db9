"""Trust Models - User statistics and the trust score breakdown derived from them."""

from enum import Enum
from typing import Optional

from pydantic import Field

from ridetrust.models.common import CamelModel


class TrustCategory(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class UserStatistics(CamelModel):
    """
    Aggregate counts needed by scoring.

    Only terminal rides are counted. late_cancellations is a subset of
    cancellations; no_shows are counted against the absent participant.
    """
    total_rides_as_rider: int = 0
    total_rides_as_passenger: int = 0
    completed_rides_as_rider: int = 0
    completed_rides_as_passenger: int = 0
    cancellations: int = 0
    late_cancellations: int = 0
    no_shows: int = 0
    average_rating: float = 0.0
    total_ratings: int = 0
    visible_ratings: int = 0

    @property
    def total_rides(self) -> int:
        return self.total_rides_as_rider + self.total_rides_as_passenger

    @property
    def completed_rides(self) -> int:
        return self.completed_rides_as_rider + self.completed_rides_as_passenger


class TrustComponents(CamelModel):
    rating: int = Field(..., ge=0, le=30)
    completion: int = Field(..., ge=0, le=25)
    reliability: int = Field(..., ge=0, le=25)
    experience: int = Field(..., ge=0, le=20)


class RatingCalculation(CamelModel):
    average_rating: float
    total_ratings: int
    points: int


class CompletionCalculation(CamelModel):
    completion_rate: float
    completed_rides: int
    total_rides: int
    points: int


class ReliabilityCalculation(CamelModel):
    cancellations: int
    late_cancellations: int
    no_shows: int
    deductions: int
    points: int


class ExperienceCalculation(CamelModel):
    total_rides: int
    points: int


class TrustCalculations(CamelModel):
    rating: RatingCalculation
    completion: CompletionCalculation
    reliability: ReliabilityCalculation
    experience: ExperienceCalculation


class TrustScoreBreakdown(CamelModel):
    """
    Latest computed trust score for one user.

    Replaced wholesale on every recalculation, never partially updated.
    """
    user_uid: str
    total: int = Field(..., ge=0, le=100)
    category: TrustCategory
    components: TrustComponents
    calculations: TrustCalculations

    def summary(self) -> dict:
        """Snapshot recorded in the audit trail."""
        return {"total": self.total, "category": self.category}


class TrustFilters(CamelModel):
    """Inclusive score range for the ranking."""
    min_score: Optional[int] = Field(None, ge=0, le=100)
    max_score: Optional[int] = Field(None, ge=0, le=100)
