"""
Statistics Reader

Derives the aggregate counts used by trust scoring from a user's rides,
cancellations and received ratings.
"""

from datetime import timedelta
from typing import Iterable, Optional

from ridetrust.config import settings
from ridetrust.errors import NotFoundError
from ridetrust.models.rating import Rating
from ridetrust.models.ride import CancellationCategory, ParticipantRole, RideRecord, RideStatus
from ridetrust.models.trust import UserStatistics
from ridetrust.services.rating_store import RatingStore
from ridetrust.services.ride_store import RideStore
from ridetrust.services.user_store import UserStore
from ridetrust.utils.timezone_utils import ensure_utc


def is_late_cancellation(ride: RideRecord, window: timedelta) -> bool:
    """Cancelled inside the window before departure (or after it)."""
    if ride.cancellation is None:
        return False
    cancelled_at = ensure_utc(ride.cancellation.cancelled_at)
    departure = ensure_utc(ride.departure_time)
    return cancelled_at >= departure - window


def summarize_rides(uid: str, rides: Iterable[RideRecord], window: timedelta) -> dict:
    """
    Count terminal rides per role plus cancellation behaviour.

    A no-show cancellation is charged to the participant who did not
    appear, not to the one who cancelled.
    """
    counts = {
        "total_rides_as_rider": 0,
        "total_rides_as_passenger": 0,
        "completed_rides_as_rider": 0,
        "completed_rides_as_passenger": 0,
        "cancellations": 0,
        "late_cancellations": 0,
        "no_shows": 0,
    }

    for ride in rides:
        role = ride.role_of(uid)
        if role is None or not ride.is_terminal:
            continue

        counts[f"total_rides_as_{role.value}"] += 1

        if ride.status == RideStatus.COMPLETED:
            counts[f"completed_rides_as_{role.value}"] += 1
            continue

        cancellation = ride.cancellation
        if cancellation is None:
            continue

        if cancellation.category == CancellationCategory.NO_SHOW:
            if cancellation.cancelled_by_uid != uid:
                counts["no_shows"] += 1
            continue

        if cancellation.cancelled_by_uid == uid:
            counts["cancellations"] += 1
            if is_late_cancellation(ride, window):
                counts["late_cancellations"] += 1

    return counts


def summarize_ratings(ratings: Iterable[Rating], include_hidden_in_average: bool) -> dict:
    """
    Rating count and average for a received-rating population.

    Hidden ratings always count toward total_ratings; whether they count
    toward the average is a policy switch shared with the pattern analyzer.
    """
    ratings = list(ratings)
    visible = [r for r in ratings if r.is_visible]
    averaged = ratings if include_hidden_in_average else visible

    average = sum(r.rating for r in averaged) / len(averaged) if averaged else 0.0

    return {
        "average_rating": average,
        "total_ratings": len(ratings),
        "visible_ratings": len(visible),
    }


class StatisticsReader:
    """Reads ride, rating and cancellation records for one user."""

    def __init__(
        self,
        users: UserStore,
        rides: RideStore,
        ratings: RatingStore,
        late_cancellation_window_hours: Optional[float] = None,
        include_hidden_in_average: Optional[bool] = None,
    ):
        self.users = users
        self.rides = rides
        self.ratings = ratings
        if late_cancellation_window_hours is None:
            late_cancellation_window_hours = settings.late_cancellation_window_hours
        if include_hidden_in_average is None:
            include_hidden_in_average = settings.include_hidden_ratings_in_average
        self.late_window = timedelta(hours=late_cancellation_window_hours)
        self.include_hidden_in_average = include_hidden_in_average

    async def read(self, uid: str) -> UserStatistics:
        """
        Aggregate statistics for a user.

        A user with no history gets zeroed statistics; only an unknown
        user id raises NotFoundError.
        """
        if not await self.users.exists(uid):
            raise NotFoundError("User")

        rides = await self.rides.find_for_participant(uid)
        received = await self.ratings.find(rated_uid=uid)

        return UserStatistics(
            **summarize_rides(uid, rides, self.late_window),
            **summarize_ratings(received, self.include_hidden_in_average),
        )
