"""Rating Model - Ratings left by ride participants for each other."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field

from ridetrust.models.common import CamelModel
from ridetrust.models.ride import ParticipantRole


class ModerationAction(str, Enum):
    """Admin moderation actions. Both are one-way."""
    HIDE = "hide"
    DELETE = "delete"


class Rating(CamelModel):
    """
    Rating submitted by one participant for another after a ride.

    Identity is (ride_id, rater_uid): at most one rating per rater per ride,
    and the key is never reused after deletion.
    """
    ride_id: str = Field(..., description="Ride this rating is for")
    rater_uid: str = Field(..., description="User who gave the rating")
    rated_uid: str = Field(..., description="User who received the rating")
    rater_role: ParticipantRole
    rating: int = Field(..., ge=1, le=5, description="1-5 star rating")
    review: Optional[str] = None
    tags: Optional[List[str]] = None
    is_visible: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def rating_id(self) -> str:
        return format_rating_id(self.ride_id, self.rater_uid)

    def key_snapshot(self) -> dict:
        """Key fields captured in the audit trail when a rating is moderated."""
        return {
            "rideId": self.ride_id,
            "raterUid": self.rater_uid,
            "ratedUid": self.rated_uid,
            "rating": self.rating,
            "isVisible": self.is_visible,
        }


class RatingFilters(CamelModel):
    """Filters for listing ratings (user matches rater or rated)."""
    ride_id: Optional[str] = None
    user_uid: Optional[str] = None


def format_rating_id(ride_id: str, rater_uid: str) -> str:
    return f"{ride_id}:{rater_uid}"


def parse_rating_id(rating_id: str) -> Optional[tuple]:
    """
    Split "rideId:raterUid" on the first colon; returns None when malformed.

    Ride ids never contain a colon; rater uids may.
    """
    parts = rating_id.split(":", 1)
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]
