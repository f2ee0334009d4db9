"""Rating Pattern Models - Aggregated rating statistics and abuse indicators."""

from pydantic import Field

from ridetrust.models.common import CamelModel


class RatingDistribution(CamelModel):
    one_star: int = 0
    two_star: int = 0
    three_star: int = 0
    four_star: int = 0
    five_star: int = 0

    def total(self) -> int:
        return self.one_star + self.two_star + self.three_star + self.four_star + self.five_star


class SuspiciousPatterns(CamelModel):
    has_multiple_one_star_from_same_user: bool = False
    has_unusually_high_hidden_rate: bool = False


class RatingPatterns(CamelModel):
    """
    Diagnostic summary for a human moderator.

    Never used to hide or flag ratings automatically.
    """
    total_ratings: int = 0
    average_rating: float = 0.0
    distribution: RatingDistribution = Field(default_factory=RatingDistribution)
    hidden_count: int = 0
    recent_low_ratings: int = 0
    suspicious_patterns: SuspiciousPatterns = Field(default_factory=SuspiciousPatterns)
