"""Ride Model - Read-only view of rides owned by the matching subsystem."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from ridetrust.models.common import CamelModel


class RideStatus(str, Enum):
    """Ride lifecycle status. Only completed and cancelled are terminal."""
    PENDING = "pending"
    MATCHED = "matched"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantRole(str, Enum):
    RIDER = "rider"
    PASSENGER = "passenger"


class CancellationCategory(str, Enum):
    """Stage at which a ride was cancelled."""
    BEFORE_MATCH = "before_match"
    AFTER_MATCH = "after_match"
    DURING_RIDE = "during_ride"
    NO_SHOW = "no_show"


class Cancellation(CamelModel):
    """Cancellation metadata recorded on a cancelled ride."""
    cancelled_by_uid: str = Field(..., description="Participant who cancelled")
    cancelled_at: datetime
    category: CancellationCategory = CancellationCategory.BEFORE_MATCH
    reason: Optional[str] = None


class RideRecord(CamelModel):
    """
    A ride between a rider (driver) and a passenger.

    Rides are immutable once terminal; this subsystem never writes them.
    """
    ride_id: str = Field(..., description="Unique ride ID")
    rider_uid: str = Field(..., description="User offering the ride")
    passenger_uid: Optional[str] = Field(None, description="Matched passenger")
    status: RideStatus = RideStatus.PENDING
    departure_time: datetime
    cancellation: Optional[Cancellation] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (RideStatus.COMPLETED.value, RideStatus.CANCELLED.value)

    def role_of(self, uid: str) -> Optional[ParticipantRole]:
        if uid == self.rider_uid:
            return ParticipantRole.RIDER
        if uid == self.passenger_uid:
            return ParticipantRole.PASSENGER
        return None
