"""User Model - Identity record; only rider verification fields are written here."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field

from ridetrust.models.common import CamelModel


class RiderVerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class User(CamelModel):
    uid: str = Field(..., description="User ID")
    email: Optional[str] = None
    display_name: Optional[str] = None
    rider_verification_status: Optional[RiderVerificationStatus] = None
    is_rider_verified: bool = False
    verification_note: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def verification_snapshot(self) -> dict:
        return {
            "riderVerificationStatus": self.rider_verification_status,
            "isRiderVerified": self.is_rider_verified,
        }


class VerifyRiderRequest(CamelModel):
    approved: bool
    note: Optional[str] = Field(None, max_length=500)
